"""
Debug script to fetch portfolio data and save projected display models.

No rendering: fetch, project and dump only.
Results are saved as JSON files in the debug_output/ directory.

Usage:
    python debug_fetch.py                # Fetch the configured GITHUB_USERNAME
    python debug_fetch.py alice          # Fetch a specific user
    python debug_fetch.py alice bob      # Fetch several users
    python debug_fetch.py --base-url=http://localhost:9000 alice
"""

import asyncio
import os
import sys
from dataclasses import replace

from portfolio.config.settings import ServiceConfig, settings
from portfolio.jobs.portfolio_snapshot import PortfolioSnapshotReport
from portfolio.orchestrator import PortfolioFetchOrchestrator
from portfolio.utils.logger import setup_logger

logger = setup_logger("portfolio", level=settings.LOG_LEVEL)

OUTPUT_DIR = os.path.join(os.path.dirname(__file__), "debug_output")


async def main() -> int:
    args = sys.argv[1:]

    base_url = settings.BACKEND_URL
    for arg in args:
        if arg.startswith("--base-url="):
            base_url = arg.split("=", 1)[1]

    usernames = [a for a in args if not a.startswith("--")] or [settings.GITHUB_USERNAME]

    config = ServiceConfig.from_settings(settings)
    if base_url != settings.BACKEND_URL:
        config = replace(config, base_url=base_url)

    print(f"\n{settings.APP_NAME} {settings.APP_VERSION}")
    print(f"Fetching portfolios: {usernames}")
    print(f"Service: {config.base_url}")
    print(f"Output directory: {OUTPUT_DIR}\n")

    report = PortfolioSnapshotReport(PortfolioFetchOrchestrator(config), output_dir=OUTPUT_DIR)
    result = await report.run(usernames)

    print(f"\n{'='*60}")
    print(f"  ALL DONE, results saved to {OUTPUT_DIR}/")
    print(f"{'='*60}\n")
    return 0 if result["success"] else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
