"""
Example usage of DAP Python SDK registrations

This example demonstrates how to create, sign, serialize and verify a DAP
registration, and what verification failures look like.
"""

import asyncio

from dap_sdk import (
    DapRegistration,
    DidJwk,
    InvalidJwsError,
    InvalidRegistrationError,
    RegistrationId,
    digest,
)


async def basic_registration_example():
    """Demonstrate the create, sign, parse round trip"""
    print("=== Basic Registration Example ===")

    # did:jwk identities resolve locally, so no network is needed
    bearer_did = DidJwk.create()
    print(f"DID: {bearer_did.uri[:48]}...")

    registration = DapRegistration.create('moegrammer', bearer_did.uri, 'didpay.me')
    print(f"DAP: {registration.dap}")
    print(f"ID: {registration.id} (created {registration.id.extract_date().isoformat()})")
    print(f"Digest: {registration.compute_digest().hex()}")

    await registration.sign(bearer_did)
    raw = registration.to_json()
    print(f"Serialized: {len(raw)} bytes")

    parsed = await DapRegistration.parse(raw)
    print(f"Parsed and verified: {parsed == registration}")
    print()


async def failure_example():
    """Demonstrate how verification failures are reported"""
    print("=== Verification Failure Example ===")

    bearer_did = DidJwk.create()
    registration = DapRegistration.create('moegrammer', bearer_did.uri, 'didpay.me')

    try:
        await registration.verify()
    except InvalidRegistrationError as e:
        print(f"Unsigned: {e.error_code}: {e}")

    await registration.sign(bearer_did)
    tampered = dict(registration.to_dict(), handle='someone-else')
    try:
        await DapRegistration.parse(tampered)
    except InvalidJwsError as e:
        print(f"Tampered: {e.error_code}: {e}")

    await registration.sign(DidJwk.create())
    try:
        await DapRegistration.parse(registration.to_json())
    except InvalidRegistrationError as e:
        print(f"Wrong signer: {e.error_code}: {e}")

    print()


def digest_example():
    """Demonstrate canonical digests and registration IDs"""
    print("=== Digest Example ===")

    print(f"digest({{'hello': 'world'}}) = {digest({'hello': 'world'}).hex()}")
    print(f"Key order independent: {digest({'a': 1, 'b': 2}) == digest({'b': 2, 'a': 1})}")

    first, second = RegistrationId.create(), RegistrationId.create()
    print(f"IDs sort by creation time: {first <= second}")
    print()


async def main():
    """Run all examples"""
    print("DAP Python SDK Registration Examples")
    print("=" * 60)
    print()

    await basic_registration_example()
    await failure_example()
    digest_example()

    print("All examples completed!")


if __name__ == '__main__':
    asyncio.run(main())
