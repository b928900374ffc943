"""Version information for the DAP Python SDK"""

__version__ = "0.1.0"
