"""Prometheus counters for ownership resolution."""

from __future__ import annotations

from prometheus_client import Counter

parent_lookups_total = Counter(
    "kubeowner_parent_lookups_total",
    "Single-step controlling-owner lookups by resolution path and outcome.",
    ["path", "outcome"],
)

top_level_resolutions_total = Counter(
    "kubeowner_top_level_resolutions_total",
    "Completed top-level controller resolutions by outcome.",
    ["outcome"],
)

informer_relists_total = Counter(
    "kubeowner_informer_relists_total",
    "Full relists performed by an informer.",
    ["kind"],
)
