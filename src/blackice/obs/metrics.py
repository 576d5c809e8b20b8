"""Prometheus instrumentation for the HTTP surface.

Labels stay low-cardinality: outcome names only, never key names or fingerprints.
"""
from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

REGISTRY = CollectorRegistry()

FINGERPRINTS = Counter(
    "blackice_fingerprints_total",
    "Fingerprint derivations by result.",
    ["result"],
    registry=REGISTRY,
)
SCANS = Counter(
    "blackice_scans_total",
    "Identity scans by result (allowed, not_found, error).",
    ["result"],
    registry=REGISTRY,
)
LISTINGS = Counter(
    "blackice_listings_total",
    "Direct key-pair and instance listings (scans not included).",
    ["operation"],
    registry=REGISTRY,
)
SCAN_INSTANCES = Histogram(
    "blackice_scan_instances",
    "Number of instances in an allow-list.",
    buckets=(0, 1, 2, 5, 10, 25, 50, 100, 250, 1000),
    registry=REGISTRY,
)


def prometheus_latest() -> tuple[bytes, str]:
    return generate_latest(REGISTRY), CONTENT_TYPE_LATEST
