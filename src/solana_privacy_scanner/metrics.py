"""Prometheus metrics for the analysis pipeline."""

from prometheus_client import Counter, Histogram

SCANS_TOTAL = Counter(
    "privacy_scans_total",
    "Total number of completed wallet privacy analyses",
    ["tier"],
)

DETECTOR_FAILURES = Counter(
    "privacy_detector_failures_total",
    "Detector runs that raised and fell back to a zero-risk default",
    ["detector"],
)

DATA_SOURCE_FAILURES = Counter(
    "privacy_data_source_failures_total",
    "Transaction source failures replaced by an empty history",
)

SCAN_DURATION = Histogram(
    "privacy_scan_duration_seconds",
    "Wall-clock duration of a wallet analysis",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)
