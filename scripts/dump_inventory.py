#!/usr/bin/env python3
"""Script to dump the repository inventory to CSV and JSON."""

import logging
import sys
import os
import csv
import json
from dataclasses import asdict, fields
from datetime import datetime
from typing import List

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from stash_client.domain.repository import RepositoryRecord
from stash_client.infrastructure.stash_client import StashClient
from stash_client.application.inventory_service import InventoryService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def dump_to_csv(records: List[RepositoryRecord], output_file: str):
    """Dump records to CSV."""
    if not records:
        logger.warning("No data to dump")
        return

    with open(output_file, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=[f.name for f in fields(RepositoryRecord)])
        writer.writeheader()
        writer.writerows(asdict(record) for record in records)

    logger.info(f"Dumped {len(records)} repositories to {output_file}")


def dump_to_json(records: List[RepositoryRecord], output_file: str):
    """Dump records to JSON."""
    if not records:
        logger.warning("No data to dump")
        return

    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump([asdict(record) for record in records], f, indent=2, ensure_ascii=False)

    logger.info(f"Dumped {len(records)} repositories to {output_file}")


def main():
    """Collect the inventory and dump it to CSV and JSON."""
    try:
        output_dir = os.getenv("OUTPUT_DIR", "artifacts")
        os.makedirs(output_dir, exist_ok=True)

        client = StashClient.from_env()
        records = InventoryService(client).collect(project_key=os.getenv("STASH_PROJECT"))

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        csv_file = os.path.join(output_dir, f"repositories_{timestamp}.csv")
        json_file = os.path.join(output_dir, f"repositories_{timestamp}.json")

        dump_to_csv(records, csv_file)
        dump_to_json(records, json_file)

        logger.info(f"Inventory dump completed. Files: {csv_file}, {json_file}")
        return 0
    except Exception as e:
        logger.error(f"Inventory dump failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
