#!/usr/bin/env python3
"""Reconcile stored portfolio media references with the blob inventory.

Default is dry-run: the repair is computed and reported, nothing is written.
Use --apply to persist changed groups and refresh the disk cache.
No blob objects are ever deleted.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Sequence

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from portfolio.config import settings  # noqa: E402
from portfolio.logging_utils import setup_logging  # noqa: E402
from portfolio.schemas import EntityKind, PortfolioPayload  # noqa: E402
from portfolio.services.blob_storage import BlobStorageService  # noqa: E402
from portfolio.services.data_cache import DataCache  # noqa: E402
from portfolio.services.data_fallback import is_remote_unavailable  # noqa: E402
from portfolio.services.kv_store import KVStoreClient  # noqa: E402
from portfolio.services.media_repair import MediaRewrite, PortfolioRepairResult  # noqa: E402
from portfolio.services.portfolio_data import PortfolioDataService  # noqa: E402
from portfolio.utils.media_paths import (  # noqa: E402
    MediaNamespace,
    media_source_description,
    media_source_type,
)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Repair portfolio media references.")
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Persist repaired groups and refresh the disk cache (default is dry-run).",
    )
    parser.add_argument(
        "--prefix",
        default=settings.blob_prefix,
        help="Blob namespace prefix (default: $BLOB_PREFIX or web-pics).",
    )
    parser.add_argument(
        "--audit",
        action="store_true",
        help="Also print how many stored references point at blob, local, external or unset media.",
    )
    parser.add_argument(
        "--cache-path",
        default=None,
        help="Disk cache location (default: resolved from the environment).",
    )
    return parser.parse_args(argv)


def format_rewrites(rewrites: Sequence[MediaRewrite]) -> list[str]:
    lines: list[str] = []
    for kind in EntityKind:
        group = [rewrite for rewrite in rewrites if rewrite.group == kind]
        if not group:
            continue
        lines.append(f"- Updated {len(group)} {kind.value} field(s).")
        for rewrite in group:
            lines.append(f"   - {rewrite.label}: {rewrite.field} -> {rewrite.after}")
    return lines


def audit_references(payload: PortfolioPayload, namespace: MediaNamespace) -> dict[str, int]:
    records = [payload.personal] if payload.personal is not None else []
    records += [*payload.projects, *payload.achievements, *payload.mentorship]

    counts: dict[str, int] = {}
    for record in records:
        for field_name in record.repair_fields:
            source = media_source_type(getattr(record, field_name, None), namespace)
            key = media_source_description(source)
            counts[key] = counts.get(key, 0) + 1
    return {k: counts[k] for k in sorted(counts)}


def format_audit(counts: dict[str, int]) -> list[str]:
    return ["Media references:", *(f"- {name}: {count}" for name, count in counts.items())]


def summarize(result: PortfolioRepairResult, *, applied: bool) -> str:
    if not result.changed:
        return "No repairs needed. Media references already aligned with blob inventory."
    header = "Repair completed." if applied else "Dry-run: the following repairs would be applied."
    return "\n".join([header, *format_rewrites(result.rewrites)])


async def run(args: argparse.Namespace, service: PortfolioDataService) -> int:
    datasets = await service.fetch_datasets()
    if is_remote_unavailable(datasets):
        print("Remote store returned no data; check UPSTASH_REDIS_REST_URL/TOKEN.", file=sys.stderr)
        return 1

    result = await service.repair(datasets.to_payload())
    if getattr(args, "audit", False):
        print("\n".join(format_audit(audit_references(result.payload, service.namespace))))

    if args.apply and result.changed:
        persisted = await service.persist_repairs(result)
        await service.cache.sync(result.payload)
        print(summarize(result, applied=True))
        failed = [kind.value for kind, ok in persisted.items() if not ok]
        if failed:
            print(f"Failed to persist: {', '.join(failed)}", file=sys.stderr)
            return 1
        return 0

    print(summarize(result, applied=False))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging("WARNING")
    kv = KVStoreClient()
    if not kv.enabled:
        print(
            "Upstash credentials missing. Set UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN.",
            file=sys.stderr,
        )
        return 1
    service = PortfolioDataService(
        kv=kv,
        blob_storage=BlobStorageService(),
        cache=DataCache(args.cache_path),
        namespace=MediaNamespace(base_url=settings.blob_base_url, prefix=args.prefix),
    )
    return asyncio.run(run(args, service))


if __name__ == "__main__":
    raise SystemExit(main())
