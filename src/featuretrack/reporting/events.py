"""Test lifecycle events.

The runner reports a flat stream of events: a run starts, cases start and
finish one at a time with their steps in between, and the run finishes.
Events form a closed tagged union discriminated by :class:`EventKind`.

Events can also be decoded from newline-delimited JSON, one object per
line, e.g.::

    {"type": "case_started", "instant": "2024-01-01T12:00:00Z",
     "case": {"uri": "classpath:login.feature", "line": 3, "name": "Valid login"}}
"""

from __future__ import annotations

import enum
import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


class UnclassifiedStepError(TypeError):
    """Raised for a test step that is neither a pickle step nor a hook."""


class EventDecodeError(ValueError):
    """Raised when a serialized event record cannot be decoded."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class EventKind(str, enum.Enum):
    """Discriminator for the Event tagged union."""

    SOURCE_READ = "source_read"
    RUN_STARTED = "run_started"
    CASE_STARTED = "case_started"
    STEP_STARTED = "step_started"
    STEP_FINISHED = "step_finished"
    CASE_FINISHED = "case_finished"
    RUN_FINISHED = "run_finished"


class Status(str, enum.Enum):
    """Outcome of a step or case."""

    PASSED = "passed"
    SKIPPED = "skipped"
    PENDING = "pending"
    UNDEFINED = "undefined"
    AMBIGUOUS = "ambiguous"
    FAILED = "failed"

    def is_ok(self, strict: bool) -> bool:
        """Whether this status counts as success under *strict* mode."""
        if self in (Status.PASSED, Status.SKIPPED):
            return True
        if self in (Status.PENDING, Status.UNDEFINED):
            return not strict
        return False


class HookType(str, enum.Enum):
    BEFORE = "before"
    AFTER = "after"
    BEFORE_STEP = "before_step"
    AFTER_STEP = "after_step"


class StepKind(str, enum.Enum):
    PICKLE = "pickle"
    HOOK = "hook"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TestCase:
    """An executable case: a scenario or one row of an outline.

    Attributes:
        uri: Uri of the feature document the case belongs to.
        line: Line of the scenario, or of the examples row for outlines.
        name: Name of the case as compiled by the runner.
        tags: Tag names of the case.
    """

    __test__ = False

    uri: str
    line: int
    name: str = ""
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class PickleStep:
    """An ordinary Given/When/Then step."""

    kind: StepKind = field(default=StepKind.PICKLE, init=False)
    text: str = ""
    line: int | None = None


@dataclass(frozen=True)
class HookStep:
    """A before/after hook executed as part of a case."""

    kind: StepKind = field(default=StepKind.HOOK, init=False)
    hook_type: HookType = HookType.BEFORE


TestStep = PickleStep | HookStep


def step_text(step: Any) -> str:
    """Return the label of *step* as shown in progress output.

    Raises:
        UnclassifiedStepError: If *step* is not a known step kind.
    """
    kind = getattr(step, "kind", None)
    if kind == StepKind.PICKLE and isinstance(step, PickleStep):
        return step.text
    if kind == StepKind.HOOK and isinstance(step, HookStep):
        return f"Hook {step.hook_type.value}"
    raise UnclassifiedStepError(
        f"Cannot classify test step of type {type(step).__name__}: "
        "expected a pickle step or a hook"
    )


@dataclass(frozen=True)
class ErrorInfo:
    """Failure detail attached to a result.  Every field may be absent."""

    message: str | None = None
    details: str | None = None
    expected: str | None = None
    actual: str | None = None

    @property
    def is_comparison(self) -> bool:
        return self.expected is not None and self.actual is not None


@dataclass(frozen=True)
class Result:
    status: Status
    duration_ms: int = 0
    error: ErrorInfo | None = None


@dataclass(frozen=True)
class SourceRead:
    kind: EventKind = field(default=EventKind.SOURCE_READ, init=False)
    instant: datetime = field(default_factory=_utcnow)
    uri: str = ""
    source: str = ""


@dataclass(frozen=True)
class RunStarted:
    kind: EventKind = field(default=EventKind.RUN_STARTED, init=False)
    instant: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class CaseStarted:
    kind: EventKind = field(default=EventKind.CASE_STARTED, init=False)
    instant: datetime = field(default_factory=_utcnow)
    case: TestCase | None = None


@dataclass(frozen=True)
class StepStarted:
    kind: EventKind = field(default=EventKind.STEP_STARTED, init=False)
    instant: datetime = field(default_factory=_utcnow)
    case: TestCase | None = None
    step: TestStep | None = None


@dataclass(frozen=True)
class StepFinished:
    kind: EventKind = field(default=EventKind.STEP_FINISHED, init=False)
    instant: datetime = field(default_factory=_utcnow)
    case: TestCase | None = None
    step: TestStep | None = None
    result: Result = field(default_factory=lambda: Result(Status.PASSED))


@dataclass(frozen=True)
class CaseFinished:
    kind: EventKind = field(default=EventKind.CASE_FINISHED, init=False)
    instant: datetime = field(default_factory=_utcnow)
    case: TestCase | None = None
    result: Result = field(default_factory=lambda: Result(Status.PASSED))


@dataclass(frozen=True)
class RunFinished:
    kind: EventKind = field(default=EventKind.RUN_FINISHED, init=False)
    instant: datetime = field(default_factory=_utcnow)


Event = (
    SourceRead
    | RunStarted
    | CaseStarted
    | StepStarted
    | StepFinished
    | CaseFinished
    | RunFinished
)


# ---------------------------------------------------------------------------
# JSON decoding
# ---------------------------------------------------------------------------


def _instant(raw: Any) -> datetime:
    if raw is None:
        return _utcnow()
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw, tz=timezone.utc)
    text = str(raw)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    instant = datetime.fromisoformat(text)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant


def _case(raw: Any) -> TestCase:
    if not isinstance(raw, dict):
        raise EventDecodeError("'case' must be an object")
    try:
        return TestCase(
            uri=str(raw["uri"]),
            line=int(raw["line"]),
            name=str(raw.get("name") or ""),
            tags=tuple(raw.get("tags") or ()),
        )
    except KeyError as exc:
        raise EventDecodeError(f"'case' is missing {exc.args[0]!r}") from None


def _step(raw: Any) -> TestStep:
    if not isinstance(raw, dict):
        raise EventDecodeError("'step' must be an object")
    step_type = raw.get("type", StepKind.PICKLE.value)
    if step_type == StepKind.PICKLE.value:
        line = raw.get("line")
        return PickleStep(text=str(raw.get("text") or ""), line=int(line) if line else None)
    if step_type == StepKind.HOOK.value:
        try:
            return HookStep(hook_type=HookType(raw.get("hook_type", "before")))
        except ValueError as exc:
            raise EventDecodeError(str(exc)) from None
    raise EventDecodeError(f"Unknown step type {step_type!r}")


def _result(raw: Any) -> Result:
    if not isinstance(raw, dict):
        raise EventDecodeError("'result' must be an object")
    try:
        status = Status(raw.get("status", "passed"))
    except ValueError as exc:
        raise EventDecodeError(str(exc)) from None
    raw_error = raw.get("error")
    error = None
    if isinstance(raw_error, dict):
        error = ErrorInfo(
            message=raw_error.get("message"),
            details=raw_error.get("details"),
            expected=raw_error.get("expected"),
            actual=raw_error.get("actual"),
        )
    elif isinstance(raw_error, str):
        error = ErrorInfo(message=raw_error)
    return Result(
        status=status,
        duration_ms=int(raw.get("duration_ms") or 0),
        error=error,
    )


def decode_event(data: dict[str, Any]) -> Event:
    """Build an :data:`Event` from its JSON object form.

    Raises:
        EventDecodeError: If the record is malformed.
    """
    if not isinstance(data, dict):
        raise EventDecodeError("event must be a JSON object")
    try:
        kind = EventKind(data.get("type"))
    except ValueError:
        raise EventDecodeError(f"Unknown event type {data.get('type')!r}") from None
    try:
        instant = _instant(data.get("instant"))
    except (TypeError, ValueError) as exc:
        raise EventDecodeError(f"Invalid instant: {exc}") from None

    if kind == EventKind.SOURCE_READ:
        return SourceRead(
            instant=instant, uri=str(data.get("uri", "")), source=str(data.get("source", ""))
        )
    if kind == EventKind.RUN_STARTED:
        return RunStarted(instant=instant)
    if kind == EventKind.CASE_STARTED:
        return CaseStarted(instant=instant, case=_case(data.get("case")))
    if kind == EventKind.STEP_STARTED:
        return StepStarted(
            instant=instant, case=_case(data.get("case")), step=_step(data.get("step"))
        )
    if kind == EventKind.STEP_FINISHED:
        return StepFinished(
            instant=instant,
            case=_case(data.get("case")),
            step=_step(data.get("step")),
            result=_result(data.get("result") or {}),
        )
    if kind == EventKind.CASE_FINISHED:
        return CaseFinished(
            instant=instant,
            case=_case(data.get("case")),
            result=_result(data.get("result") or {}),
        )
    return RunFinished(instant=instant)


def read_events(lines: Iterable[str]) -> Iterator[Event]:
    """Decode newline-delimited JSON *lines*, skipping blank ones.

    Raises:
        EventDecodeError: With the 1-based line number of a bad record.
    """
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            yield decode_event(json.loads(line))
        except json.JSONDecodeError as exc:
            raise EventDecodeError(f"Invalid JSON: {exc.msg}", number) from None
        except EventDecodeError as exc:
            raise EventDecodeError(str(exc), number) from None
