#!/usr/bin/env python3
"""
On-demand scan request

Queues a scan for one website and, with --run, executes it immediately
instead of waiting for the next drain of the pending queue.

Usage:
    python -m scripts.enqueue_scan <website_id> [--run]
"""

import argparse
import asyncio
import sys

from app.features.scan.services.orchestration.builder import build_scan_services
from app.platform.exceptions import NotFoundError


async def enqueue_scan(website_id: str, run_now: bool) -> int:
    services = build_scan_services()
    try:
        scan = await services.queue.enqueue(website_id)
    except NotFoundError as e:
        print(f"❌ {e}")
        return 1

    print(f"✅ Scan {scan.id} queued")
    if run_now:
        scan = await services.runner.execute(scan.id)
        print(f"Scan {scan.id} finished: {scan.status.value}")
        if scan.error_message:
            print(f"   {scan.error_message}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Queue a WebPulse scan for a website")
    parser.add_argument("website_id", help="ID of the website to scan")
    parser.add_argument("--run", action="store_true", help="Execute the scan right away")
    args = parser.parse_args()

    sys.exit(asyncio.run(enqueue_scan(args.website_id, args.run)))


if __name__ == "__main__":
    main()
