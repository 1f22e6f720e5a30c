"""Live progress reporting in the TeamCity service message format."""

from featuretrack.reporting.events import (
    CaseFinished,
    CaseStarted,
    ErrorInfo,
    Event,
    EventDecodeError,
    EventKind,
    HookStep,
    HookType,
    PickleStep,
    Result,
    RunFinished,
    RunStarted,
    SourceRead,
    Status,
    StepFinished,
    StepStarted,
    UnclassifiedStepError,
    decode_event,
    read_events,
    step_text,
)
from featuretrack.reporting.protocol import (
    escape,
    format_timestamp,
    parse_message,
    render,
    unescape,
)
from featuretrack.reporting.reducer import ProgressReducer, ReporterState, ScenarioLine
from featuretrack.reporting.reporter import TeamCityReporter

__all__ = [
    "CaseFinished",
    "CaseStarted",
    "ErrorInfo",
    "Event",
    "EventDecodeError",
    "EventKind",
    "HookStep",
    "HookType",
    "PickleStep",
    "ProgressReducer",
    "ReporterState",
    "Result",
    "RunFinished",
    "RunStarted",
    "ScenarioLine",
    "SourceRead",
    "Status",
    "StepFinished",
    "StepStarted",
    "TeamCityReporter",
    "UnclassifiedStepError",
    "decode_event",
    "escape",
    "format_timestamp",
    "parse_message",
    "read_events",
    "render",
    "step_text",
    "unescape",
]
