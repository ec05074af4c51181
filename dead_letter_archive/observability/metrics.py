"""
Prometheus metrics collection for the dead letter archive

Counters and histograms describing how many dead letter records were
archived, how many could not be enriched, and how the object store behaved.
"""
from prometheus_client import (
    Counter,
    Histogram,
    CollectorRegistry,
    generate_latest,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# ARCHIVE METRICS
# =======================

records_archived_total = Counter(
    name="dla_records_archived_total",
    documentation="Total number of dead letter records written to the archive",
    labelnames=["kind"],  # kind: enriched, opaque
    registry=REGISTRY,
)

batch_size = Histogram(
    name="dla_batch_size_records",
    documentation="Number of dead letter records in each invocation",
    buckets=[1, 5, 10, 25, 50, 100, 500, 1000],
    registry=REGISTRY,
)

# =======================
# ENRICHMENT METRICS
# =======================

enrichment_failures_total = Counter(
    name="dla_enrichment_failures_total",
    documentation="Records archived without full metadata",
    labelnames=["reason"],  # reason: classification_miss, resolution_failure, depth_exceeded
    registry=REGISTRY,
)

# =======================
# OBJECT STORE METRICS
# =======================

archive_writes_total = Counter(
    name="dla_archive_writes_total",
    documentation="Total number of archive object writes",
    labelnames=["status"],  # status: success, failure
    registry=REGISTRY,
)

archive_write_duration_seconds = Histogram(
    name="dla_archive_write_duration_seconds",
    documentation="Time spent writing a single archive object in seconds",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=REGISTRY,
)

records_migrated_total = Counter(
    name="dla_records_migrated_total",
    documentation="Legacy archive objects processed by the migration",
    labelnames=["status"],  # status: migrated, failed, skipped
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(archive_write_duration_seconds):
            ...
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        metric = self.histogram.labels(**self.labels) if self.labels else self.histogram
        self.timer = metric.time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    counter.labels(**labels).inc(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    """
    Observe a value in a histogram metric

    Args:
        histogram: Prometheus Histogram metric
        value: Value to observe
        **labels: Label values for the metric
    """
    if labels:
        histogram.labels(**labels).observe(value)
    else:
        histogram.observe(value)
