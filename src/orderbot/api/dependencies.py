from __future__ import annotations

from orderbot.api.middleware.request_id import get_request_id
from orderbot.application.use_cases.context import TraceContext
from orderbot.infrastructure.observability.otel import current_trace_id


def get_trace_context() -> TraceContext:
    return TraceContext(trace_id=current_trace_id(), request_id=get_request_id())
