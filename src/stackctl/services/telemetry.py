"""Operation traces for ``--verbose`` runs.

A trace is a tree of :class:`Span` records rooted at a ``@traced`` service
entry point. Each span carries the attributes of the step it times (app,
environment, region) and the AWS API calls issued while it was the
innermost open span. Calls are captured from botocore's client event hooks
installed by :func:`instrument_client`, so paginators and waiters are
recorded too.

Off by default: every hook starts with a single ContextVar lookup.
The finished tree lands in ``ServiceResult.meta["telemetry"]``.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from stackctl.services.result import ServiceResult

_enabled: ContextVar[bool] = ContextVar("_telemetry_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)

_CALL_STARTED = "stackctl_call_started"

logger = structlog.get_logger("stackctl.telemetry")


@dataclass(frozen=True)
class AwsCall:
    """One AWS API request as seen by a botocore client."""

    service: str
    operation: str
    region: str | None
    duration_ms: float | None = None
    error_code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "service": self.service,
            "operation": self.operation,
            "region": self.region,
        }
        if self.duration_ms is not None:
            result["duration_ms"] = round(self.duration_ms, 2)
        if self.error_code:
            result["error_code"] = self.error_code
        return result


@dataclass
class Span:
    """A timed step with its attributes and the AWS calls made inside it."""

    name: str
    attributes: dict[str, Any] = field(default_factory=dict)
    children: list[Span] = field(default_factory=list)
    aws_calls: list[AwsCall] = field(default_factory=list)
    started: float = field(default_factory=time.perf_counter)
    ended: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.ended is None:
            return 0.0
        return (self.ended - self.started) * 1000

    def finish(self) -> None:
        self.ended = time.perf_counter()

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value

    def call_count(self) -> int:
        """AWS calls made in this span and all of its descendants."""
        return len(self.aws_calls) + sum(c.call_count() for c in self.children)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.attributes:
            result["attributes"] = dict(self.attributes)
        if self.aws_calls:
            result["aws_calls"] = [c.to_dict() for c in self.aws_calls]
        if self.children:
            result["children"] = [c.to_dict() for c in self.children]
        return result


@contextmanager
def trace_span(name: str, **attributes: Any) -> Generator[Span | None]:
    """Open a step under the current span; yields None outside a trace."""
    parent = _current_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    child = Span(name=name, attributes=attributes)
    parent.children.append(child)
    token = _current_span.set(child)
    try:
        yield child
    finally:
        child.finish()
        _current_span.reset(token)


def record_aws_call(call: AwsCall) -> None:
    """Attach *call* to the innermost open span, if a trace is running."""
    span = get_current_span()
    if span is None:
        return
    span.aws_calls.append(call)
    logger.debug("aws.call", span_name=span.name, **call.to_dict())


def instrument_client(client: Any) -> None:
    """Register botocore hooks that report *client*'s requests to the trace."""
    service = client.meta.service_model.service_name
    region = client.meta.region_name

    def _operation(event_name: str) -> str:
        return event_name.rsplit(".", 1)[-1]

    def _started(context: dict[str, Any] | None = None, **_: Any) -> None:
        if context is not None and get_current_span() is not None:
            context[_CALL_STARTED] = time.perf_counter()

    def _elapsed(context: dict[str, Any] | None) -> float | None:
        started = (context or {}).get(_CALL_STARTED)
        if started is None:
            return None
        return (time.perf_counter() - started) * 1000

    def _finished(
        event_name: str,
        parsed: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
        **_: Any,
    ) -> None:
        if get_current_span() is None:
            return
        code = ((parsed or {}).get("Error") or {}).get("Code")
        record_aws_call(
            AwsCall(
                service=service,
                operation=_operation(event_name),
                region=region,
                duration_ms=_elapsed(context),
                error_code=code or None,
            )
        )

    def _failed(
        event_name: str,
        exception: Exception | None = None,
        context: dict[str, Any] | None = None,
        **_: Any,
    ) -> None:
        if get_current_span() is None:
            return
        record_aws_call(
            AwsCall(
                service=service,
                operation=_operation(event_name),
                region=region,
                duration_ms=_elapsed(context),
                error_code=type(exception).__name__ if exception is not None else "Unknown",
            )
        )

    events = client.meta.events
    events.register("before-parameter-build", _started)
    events.register("after-call", _finished)
    events.register("after-call-error", _failed)


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Root a trace at a service method and attach it to ServiceResult.meta."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _enabled.get():
            return func(*args, **kwargs)

        root = Span(name=func.__qualname__)
        token = _current_span.set(root)
        ok = False
        try:
            result = func(*args, **kwargs)
            ok = not isinstance(result, ServiceResult) or result.ok
        finally:
            root.finish()
            _current_span.reset(token)
            logger.debug(
                "trace.complete",
                span_name=root.name,
                duration_ms=round(root.duration_ms, 2),
                ok=ok,
                aws_calls=root.call_count(),
            )

        if isinstance(result, ServiceResult):
            meta = {**(result.meta or {}), "telemetry": root.to_dict()}
            result = result.model_copy(update={"meta": meta})  # type: ignore[assignment]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Called by AppContext when ``--verbose`` is set."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def get_current_span() -> Span | None:
    if not _enabled.get():
        return None
    return _current_span.get()
