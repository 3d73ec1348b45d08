#!/usr/bin/env python3
"""
Server startup script for the recipe search service
"""
import sys
from pathlib import Path

import uvicorn

# Add project root to Python path
project_root = Path(__file__).parent.parent.absolute()
sys.path.insert(0, str(project_root))

from app.config.settings import settings


def main():
    """Start the server"""
    print("🚀 Starting recipe search service...")
    print(f"🔍 OpenSearch: {settings.opensearch_host}:{settings.opensearch_port} "
          f"(index prefix '{settings.opensearch_index_prefix}')")
    print(f"🗄️  Database: {settings.database_url.split('@')[-1]}")

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
