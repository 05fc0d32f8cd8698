"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    HISTORY_SIZE,
    PIPELINE_RUNS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    STAGE_LATENCY,
    observe_pipeline_run,
    observe_request,
    observe_stage,
    set_history_size,
)

__all__ = [
    "ERROR_COUNTER",
    "HISTORY_SIZE",
    "PIPELINE_RUNS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "STAGE_LATENCY",
    "observe_pipeline_run",
    "observe_request",
    "observe_stage",
    "set_history_size",
]
