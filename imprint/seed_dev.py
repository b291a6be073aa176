"""Provision a development tenant for an existing identity-provider organization.

Use when the organization was created before the webhook endpoint was
reachable. Idempotent: an already provisioned organization is left alone.

    python -m imprint.seed_dev org_2o5yucCtMDzF4V1cNgv9DA5o9Sm
"""

import argparse
import asyncio

from imprint.core.database import engine
from imprint.services.provisioning import SubscriptionTier, provision_tenant


async def seed_dev_tenant(org_handle: str, name: str, tier: SubscriptionTier) -> None:
    try:
        result = await provision_tenant(org_handle, name, tier)
    finally:
        await engine.dispose()

    if result.created:
        print(f"Created tenant {result.tenant_id} for {org_handle} ({tier})")
    else:
        print(f"Tenant already exists for {org_handle}: {result.tenant_id}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("org_handle", help="identity-provider organization id (org_...)")
    parser.add_argument("--name", default="Dev Test Publisher")
    parser.add_argument(
        "--tier",
        choices=[t.value for t in SubscriptionTier],
        default=SubscriptionTier.STARTER.value,
    )
    args = parser.parse_args(argv)

    if not args.org_handle.startswith("org_"):
        parser.error("org_handle must start with 'org_'")

    asyncio.run(seed_dev_tenant(args.org_handle, args.name, SubscriptionTier(args.tier)))


if __name__ == "__main__":
    main()
