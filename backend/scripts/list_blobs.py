#!/usr/bin/env python3
"""Print the blob inventory: actual path, canonical key and size."""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path
from typing import Sequence

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from portfolio.config import settings  # noqa: E402
from portfolio.services.blob_inventory import list_all_blobs  # noqa: E402
from portfolio.services.blob_storage import BlobStorageError, BlobStorageService  # noqa: E402
from portfolio.utils.media_keys import inventory_key  # noqa: E402


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="List blobs under the media namespace.")
    parser.add_argument("--prefix", default=settings.blob_prefix)
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, storage: BlobStorageService) -> int:
    start = time.monotonic()
    try:
        blobs = await list_all_blobs(storage, prefix=args.prefix)
    except BlobStorageError as exc:
        if exc.error == "not_configured":
            print(
                "Failed to list blobs: missing BLOB_READ_ONLY_TOKEN or BLOB_READ_WRITE_TOKEN.",
                file=sys.stderr,
            )
        else:
            print(f"Failed to list blobs: {exc}", file=sys.stderr)
        return 1

    if not blobs:
        print("No blobs returned. Ensure the blob token is configured and assets exist.", file=sys.stderr)
        return 0

    print(f"Found {len(blobs)} blob(s) in {time.monotonic() - start:.2f}s\n")
    for blob in blobs:
        key = inventory_key(blob.pathname, args.prefix) or "-"
        size = f"{blob.size}B" if blob.size is not None else "?"
        print(f"{blob.pathname} {key} {size}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    return asyncio.run(run(parse_args(argv), BlobStorageService()))


if __name__ == "__main__":
    raise SystemExit(main())
