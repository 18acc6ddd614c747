#!/usr/bin/env python3
"""Script to list repositories of a Stash server."""

import logging
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from stash_client.infrastructure.stash_client import StashClient
from stash_client.application.inventory_service import InventoryService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def main(argv=None):
    """Print ``PROJECT/slug`` for every repository, or one project's."""
    argv = sys.argv[1:] if argv is None else argv
    project_key = argv[0] if argv else None

    try:
        client = StashClient.from_env()
        records = InventoryService(client).collect(project_key=project_key)

        for record in records:
            print(f"{record.project_key}/{record.slug}")

        return 0 if records else 1

    except Exception as e:
        logger.error(f"Listing failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
