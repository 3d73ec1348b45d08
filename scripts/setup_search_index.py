#!/usr/bin/env python3
"""
Provision the search indices and reindex every public recipe.

Creates the recipe and ingredient indices when they are missing, then streams
all public recipes from the relational store into OpenSearch, removes
documents that are no longer public and rebuilds the ingredient facets.
Safe to run repeatedly.

Usage:
    python scripts/setup_search_index.py [--batch-size 500]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config.settings import settings
from core.domain.exceptions import SearchError
from infrastructure.container import DIContainer

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def run(batch_size: int) -> int:
    container = DIContainer(settings)
    try:
        if settings.database_auto_create:
            container.database.create_all()

        print(f"🔍 Provisioning indices with prefix '{settings.opensearch_index_prefix}'...")
        report = await container.sync_service.provision_and_reindex(batch_size)
    except SearchError as e:
        logger.error(f"Search index setup failed: {e}")
        print(f"❌ Search index setup failed: {e}")
        return 1
    finally:
        await container.shutdown()

    print("\n" + "=" * 60)
    print("📊 REINDEX SUMMARY")
    print("=" * 60)
    print(f"Recipes indexed:        {report.recipes_indexed}")
    print(f"Recipes failed:         {len(report.recipes_failed)}")
    print(f"Stale documents removed: {report.stale_documents_removed}")
    print(f"Ingredient facets:      {report.facets_indexed}")
    print(f"Facets failed:          {len(report.facets_failed)}")
    print(f"Took:                   {report.took}ms")
    for error in report.errors:
        print(f"⚠️  {error}")

    if report.ok:
        print("✅ Search index setup completed")
    else:
        print("⚠️  Search index setup completed with errors")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Provision search indices and reindex all public recipes")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=settings.sync_bulk_batch_size,
        help="Recipes per bulk request (default: %(default)s)",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(run(args.batch_size)))


if __name__ == "__main__":
    main()
