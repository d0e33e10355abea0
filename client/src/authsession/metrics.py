"""
Prometheus metrics for the session access layer.

Counters are registered once at import time on the default registry.
The library never starts an exposition server; applications that already
serve ``prometheus_client`` metrics pick these up automatically.

Metrics
-------

* ``authsession_renewals_total{outcome=...}`` - renewal attempts by
  outcome (``success``/``failure``).
* ``authsession_renewal_waiters_total`` - callers that waited on a renewal
  started by another call.
* ``authsession_replays_total`` - calls re-dispatched after a renewal.
* ``authsession_request_failures_total{kind=...}`` - failures surfaced to
  callers, by classification.
* ``authsession_teardowns_total`` - sessions torn down after a failed
  renewal.
"""

from __future__ import annotations

from prometheus_client import Counter

RENEWALS = Counter(
    "authsession_renewals_total",
    "Session renewal calls by outcome",
    labelnames=["outcome"],
)
RENEWAL_WAITERS = Counter(
    "authsession_renewal_waiters_total",
    "Callers that waited on an in-flight renewal",
)
REPLAYS = Counter(
    "authsession_replays_total",
    "Calls replayed after a successful renewal",
)
REQUEST_FAILURES = Counter(
    "authsession_request_failures_total",
    "Failed calls surfaced to callers by kind",
    labelnames=["kind"],
)
TEARDOWNS = Counter(
    "authsession_teardowns_total",
    "Sessions torn down after a failed renewal",
)
