"""Prometheus metrics for golf-search.

Counts candidates, compilations and executions so that a long-running
search can be inspected from a textfile collector.
"""

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    REGISTRY,
    write_to_textfile,
)

from golfsearch.config import get_settings


# Application info
APP_INFO = Info("golfsearch", "golf-search application information")

VERSION = "0.1.0"


# Search Metrics
CANDIDATES_TOTAL = Counter(
    "golfsearch_candidates_total",
    "Candidates resolved by the search",
    ["result"],  # "compile_error", "rejected", "accepted"
)

SEARCH_LENGTH = Gauge(
    "golfsearch_candidate_length",
    "Length of the candidates currently being enumerated",
)


# Toolchain Metrics
COMPILATIONS_TOTAL = Counter(
    "golfsearch_compilations_total",
    "Compiler invocations",
    ["result"],  # "success", "failure", "timeout"
)

EXECUTIONS_TOTAL = Counter(
    "golfsearch_executions_total",
    "Supervised executions of compiled candidates",
    ["status"],  # "completed", "timed_out", "failed"
)

EXECUTION_DURATION = Histogram(
    "golfsearch_execution_duration_seconds",
    "Wall-clock duration of supervised executions",
    [],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)


def record_candidate(result: str) -> None:
    """Record a resolved candidate."""
    if get_settings().metrics_enabled:
        CANDIDATES_TOTAL.labels(result=result).inc()


def record_length(length: int) -> None:
    if get_settings().metrics_enabled:
        SEARCH_LENGTH.set(length)


def record_compilation(result: str) -> None:
    """Record a compiler invocation."""
    if get_settings().metrics_enabled:
        COMPILATIONS_TOTAL.labels(result=result).inc()


def record_execution(status: str, duration: float) -> None:
    """Record one supervised execution."""
    if get_settings().metrics_enabled:
        EXECUTIONS_TOTAL.labels(status=status).inc()
        EXECUTION_DURATION.observe(duration)


def record_app_info(language: str) -> None:
    """Record the toolchain the search actually runs with."""
    APP_INFO.info({
        "version": VERSION,
        "language": language,
    })


def write_metrics(path: str) -> None:
    """Write the default registry in the Prometheus text format."""
    write_to_textfile(path, REGISTRY)
