from __future__ import annotations

from prometheus_client import Counter, Gauge

portfolio_content_source_total = Counter(
    "portfolio_content_source_total",
    "Number of portfolio reads served, labelled by the tier that supplied them.",
    ["source"],
)
portfolio_degraded_operations_total = Counter(
    "portfolio_degraded_operations_total",
    "Number of swallowed failures, labelled by component and operation.",
    ["component", "operation"],
)
portfolio_media_rewrites_total = Counter(
    "portfolio_media_rewrites_total",
    "Number of media references rewritten to a live blob path.",
    ["group"],
)
portfolio_repair_writebacks_total = Counter(
    "portfolio_repair_writebacks_total",
    "Number of repaired content groups written back to the remote store.",
    ["group", "outcome"],
)
portfolio_cache_syncs_total = Counter(
    "portfolio_cache_syncs_total",
    "Number of disk cache snapshot writes.",
    ["outcome"],
)
blob_inventory_size = Gauge(
    "blob_inventory_size",
    "Number of distinct canonical keys in the most recent blob inventory.",
)
portfolio_background_tasks = Gauge(
    "portfolio_background_tasks",
    "Fire-and-forget persistence tasks currently in flight.",
)
