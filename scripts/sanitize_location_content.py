#!/usr/bin/env python
"""
Re-sanitize rich content on every stored location.

Locations authored before sanitization (or written by other StoryPath
clients) may still carry scripts or event handlers that the preview would
render verbatim.

Usage:
    python scripts/sanitize_location_content.py [--dry-run]

Environment variables required:
    STORYPATH_API_URL
    STORYPATH_API_TOKEN   (optional)
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Dict, Optional, Sequence

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from content_sanitizer import sanitize_location_content  # noqa: E402
from storage import StoryPathServiceError  # noqa: E402
from storage.rest import StoryPathRestClient  # noqa: E402


def sanitize_all(client, dry_run: bool = False) -> Dict[str, int]:
    print("🔍 Fetching locations...")
    rows = client.get_locations()
    print(f"➡️ Retrieved {len(rows)} locations to inspect.")

    counts = {"cleaned": 0, "unchanged": 0, "failed": 0}
    for row in rows:
        original = row.get("location_content") or ""
        cleaned = sanitize_location_content(original)
        if cleaned == original:
            counts["unchanged"] += 1
            continue

        print(f"  • Cleaning {row.get('location_name')} ({row.get('id')})")
        if dry_run:
            counts["cleaned"] += 1
            continue
        try:
            client.update_location(row.get("id"), {"location_content": cleaned})
            counts["cleaned"] += 1
        except StoryPathServiceError as exc:
            print(f"    ❌ Update failed: {exc}")
            counts["failed"] += 1

    print("\n✅ Sanitization complete." if not dry_run else "\n✅ Dry run complete (no changes written).")
    print(f"    Cleaned:   {counts['cleaned']}")
    print(f"    Unchanged: {counts['unchanged']}")
    print(f"    Failed:    {counts['failed']}")
    return counts


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Re-sanitize stored StoryPath location content.")
    parser.add_argument("--dry-run", action="store_true", help="Report what would change without writing")
    args = parser.parse_args(argv)

    api_url = os.environ.get("STORYPATH_API_URL")
    if not api_url:
        raise SystemExit("Missing STORYPATH_API_URL environment variable.")

    client = StoryPathRestClient(api_url, token=os.environ.get("STORYPATH_API_TOKEN"))
    try:
        counts = sanitize_all(client, dry_run=args.dry_run)
    except StoryPathServiceError as exc:
        print(f"❌ Could not fetch locations: {exc}")
        return 2
    return 1 if counts["failed"] else 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        sys.exit("\n⚠️ Sanitization cancelled by user.")
