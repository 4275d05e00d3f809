"""Search counters: dropped rows and request outcomes.

Rows dropped for failing validation (bad UUID, bad handle, invalid
filter clause) are counted here instead of disappearing silently.
Counts go to the OpenTelemetry meter (no-op until a MeterProvider is
installed) and to an in-process tally that tests and debug endpoints
can read.
"""

from collections import Counter
from threading import Lock

from opentelemetry import metrics

DROP_INVALID_UUID = "invalid_uuid"
DROP_INVALID_HANDLE = "invalid_handle"
DROP_INVALID_CLAUSE = "invalid_clause"
DROP_MISSING_CREATOR = "missing_creator"
DROP_MALFORMED_ROW = "malformed_row"

OUTCOME_OK = "ok"
OUTCOME_RATE_LIMITED = "rate_limited"
OUTCOME_INVALID_INPUT = "invalid_input"
OUTCOME_TIMEOUT = "timeout"
OUTCOME_NOT_CONFIGURED = "not_configured"


class SearchMetrics:
    """Counter hook for drop-and-continue paths and orchestrator outcomes."""

    def __init__(self, meter_name: str = "marketsearch.search") -> None:
        meter = metrics.get_meter(meter_name)
        self._dropped = meter.create_counter(
            "search.rows_dropped",
            unit="1",
            description="Rows or clauses dropped by validation during search",
        )
        self._outcomes = meter.create_counter(
            "search.outcomes",
            unit="1",
            description="Predictive search requests by terminal outcome",
        )
        self._tally: Counter[tuple[str, str, str]] = Counter()
        self._lock = Lock()

    def record_dropped(self, source: str, reason: str, count: int = 1) -> None:
        """Count rows dropped from a source (e.g. 'listings', 'invalid_uuid')."""
        if count <= 0:
            return
        self._dropped.add(count, {"source": source, "reason": reason})
        with self._lock:
            self._tally[("dropped", source, reason)] += count

    def record_outcome(self, channel: str, outcome: str) -> None:
        """Count one search request ending in the given outcome."""
        self._outcomes.add(1, {"channel": channel, "outcome": outcome})
        with self._lock:
            self._tally[("outcome", channel, outcome)] += 1

    def dropped(self, source: str, reason: str) -> int:
        with self._lock:
            return self._tally[("dropped", source, reason)]

    def outcomes(self, channel: str, outcome: str) -> int:
        with self._lock:
            return self._tally[("outcome", channel, outcome)]


_default_metrics: SearchMetrics | None = None
_default_lock = Lock()


def get_search_metrics() -> SearchMetrics:
    """Return the process-wide SearchMetrics instance."""
    global _default_metrics
    with _default_lock:
        if _default_metrics is None:
            _default_metrics = SearchMetrics()
        return _default_metrics
