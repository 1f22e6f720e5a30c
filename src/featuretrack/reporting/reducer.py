"""Progress state machine.

The runner only reports cases and steps; it never says when a feature or
an examples block begins or ends.  :class:`ProgressReducer` reconstructs
those container boundaries from the order in which cases arrive::

    NoFeature -> FeatureOpen -> (ExamplesOpen) -> ScenarioOpen

:meth:`ProgressReducer.reduce` is a transition function
``(ReporterState, Event) -> (ReporterState, [line])``.  It reads the
document registry but never writes anywhere, so a transition either
completes with all of its lines or raises with none of them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from featuretrack.document.models import Position
from featuretrack.document.registry import DocumentRegistry
from featuretrack.hierarchy.names import examples_at, name_of
from featuretrack.hierarchy.origin import classify, location_hint
from featuretrack.reporting.events import (
    CaseFinished,
    CaseStarted,
    Event,
    EventKind,
    PickleStep,
    Result,
    RunFinished,
    RunStarted,
    Status,
    StepFinished,
    StepStarted,
    TestCase,
    step_text,
)
from featuretrack.reporting.protocol import format_timestamp, render

logger = logging.getLogger(__name__)

ROOT_SUITE_NAME = "Cucumber"
EXAMPLES_SUITE_NAME = "Examples:"
SKIPPED_MESSAGE = "Skipped step"


@dataclass(frozen=True)
class ScenarioLine:
    """Identity of a case (or examples block) by document uri and line."""

    uri: str
    line: int


@dataclass(frozen=True)
class ReporterState:
    """Open containers of the progress output.

    Attributes:
        current_feature_uri: Uri of the open feature suite.
        current_scenario_line: The open scenario or example suite.
        current_examples_line: The open ``Examples:`` suite, keyed by the
            examples block's header line.
        strict: Whether pending and undefined results count as failures.
    """

    current_feature_uri: str | None = None
    current_scenario_line: ScenarioLine | None = None
    current_examples_line: ScenarioLine | None = None
    strict: bool = False


class ProgressReducer:
    """Turns lifecycle events into TeamCity service messages."""

    def __init__(self, registry: DocumentRegistry) -> None:
        self._registry = registry

    def reduce(
        self, state: ReporterState, event: Event
    ) -> tuple[ReporterState, list[str]]:
        """Apply *event* to *state*.

        Returns:
            The next state and the lines to write, in order.

        Raises:
            DocumentNotFoundError: If the event refers to an unread document.
            UnclassifiedStepError: If a step is of an unknown kind.
        """
        lines: list[str] = []
        if event.kind == EventKind.SOURCE_READ:
            return state, lines
        if event.kind == EventKind.RUN_STARTED:
            state = self._run_started(state, event, lines)
        elif event.kind == EventKind.CASE_STARTED:
            state = self._case_started(state, event, lines)
        elif event.kind == EventKind.STEP_STARTED:
            state = self._step_started(state, event, lines)
        elif event.kind == EventKind.STEP_FINISHED:
            state = self._step_finished(state, event, lines)
        elif event.kind == EventKind.CASE_FINISHED:
            state = self._case_finished(state, event, lines)
        elif event.kind == EventKind.RUN_FINISHED:
            state = self._run_finished(state, event, lines)
        else:
            raise ValueError(f"Unknown event kind: {event.kind!r}")
        return state, lines

    # -- transitions -------------------------------------------------------

    def _run_started(
        self, state: ReporterState, event: RunStarted, lines: list[str]
    ) -> ReporterState:
        timestamp = format_timestamp(event.instant)
        lines.append(render("enteredTheMatrix", [("timestamp", timestamp)]))
        lines.append(_suite_started(timestamp, ROOT_SUITE_NAME))
        return state

    def _case_started(
        self, state: ReporterState, event: CaseStarted, lines: list[str]
    ) -> ReporterState:
        case = _require_case(event.case)
        timestamp = format_timestamp(event.instant)

        if state.current_scenario_line is not None:
            state = self._close_scenario(state, timestamp, lines)

        if case.uri != state.current_feature_uri:
            state = self._close_examples(state, timestamp, lines)
            state = self._close_feature(state, timestamp, lines)
            feature = self._registry.get(case.uri).feature
            lines.append(_suite_started(timestamp, feature.name))
            state = replace(state, current_feature_uri=case.uri)
            logger.debug("Feature opened: %s", case.uri)

        examples = examples_at(self._registry, case.uri, case.line)
        examples_line = (
            ScenarioLine(case.uri, examples.position.line)
            if examples is not None
            else None
        )
        if examples_line != state.current_examples_line:
            state = self._close_examples(state, timestamp, lines)
            if examples_line is not None:
                lines.append(_suite_started(timestamp, EXAMPLES_SUITE_NAME))
                state = replace(state, current_examples_line=examples_line)

        scenario_line = ScenarioLine(case.uri, case.line)
        if scenario_line != state.current_scenario_line:
            name = name_of(self._registry, case.uri, case.line)
            lines.append(_suite_started(timestamp, name))
            state = replace(state, current_scenario_line=scenario_line)
        return state

    def _step_started(
        self, state: ReporterState, event: StepStarted, lines: list[str]
    ) -> ReporterState:
        case = _require_case(event.case)
        label = step_text(event.step)
        lines.append(
            render(
                "testStarted",
                [
                    ("timestamp", format_timestamp(event.instant)),
                    ("locationHint", _step_location(case, event.step)),
                    ("captureStandardOutput", "true"),
                    ("name", label),
                ],
            )
        )
        return state

    def _step_finished(
        self, state: ReporterState, event: StepFinished, lines: list[str]
    ) -> ReporterState:
        label = step_text(event.step)
        timestamp = format_timestamp(event.instant)
        lines.extend(_outcome(timestamp, event.result, label, state.strict))
        lines.append(
            render(
                "testFinished",
                [
                    ("timestamp", timestamp),
                    ("duration", event.result.duration_ms),
                    ("name", label),
                ],
            )
        )
        return state

    def _case_finished(
        self, state: ReporterState, event: CaseFinished, lines: list[str]
    ) -> ReporterState:
        case = _require_case(event.case)
        timestamp = format_timestamp(event.instant)
        label = name_of(self._registry, case.uri, case.line)
        lines.extend(_outcome(timestamp, event.result, label, state.strict))
        if state.current_scenario_line == ScenarioLine(case.uri, case.line):
            state = self._close_scenario(state, timestamp, lines)
        else:
            logger.warning(
                "Case finished without a matching start: %s:%d", case.uri, case.line
            )
        return state

    def _run_finished(
        self, state: ReporterState, event: RunFinished, lines: list[str]
    ) -> ReporterState:
        timestamp = format_timestamp(event.instant)
        state = self._close_scenario(state, timestamp, lines)
        state = self._close_examples(state, timestamp, lines)
        state = self._close_feature(state, timestamp, lines)
        lines.append(_suite_finished(timestamp, ROOT_SUITE_NAME))
        return ReporterState(strict=state.strict)

    # -- container closes --------------------------------------------------

    def _close_scenario(
        self, state: ReporterState, timestamp: str, lines: list[str]
    ) -> ReporterState:
        current = state.current_scenario_line
        if current is None:
            return state
        lines.append(
            _suite_finished(timestamp, name_of(self._registry, current.uri, current.line))
        )
        return replace(state, current_scenario_line=None)

    def _close_examples(
        self, state: ReporterState, timestamp: str, lines: list[str]
    ) -> ReporterState:
        if state.current_examples_line is None:
            return state
        lines.append(_suite_finished(timestamp, EXAMPLES_SUITE_NAME))
        return replace(state, current_examples_line=None)

    def _close_feature(
        self, state: ReporterState, timestamp: str, lines: list[str]
    ) -> ReporterState:
        if state.current_feature_uri is None:
            return state
        feature = self._registry.get(state.current_feature_uri).feature
        lines.append(_suite_finished(timestamp, feature.name))
        logger.debug("Feature closed: %s", state.current_feature_uri)
        return replace(state, current_feature_uri=None)


# ---------------------------------------------------------------------------
# Message helpers
# ---------------------------------------------------------------------------


def _require_case(case: TestCase | None) -> TestCase:
    if case is None:
        raise ValueError("Event is missing its test case")
    return case


def _suite_started(timestamp: str, name: str) -> str:
    return render("testSuiteStarted", [("timestamp", timestamp), ("name", name)])


def _suite_finished(timestamp: str, name: str) -> str:
    return render("testSuiteFinished", [("timestamp", timestamp), ("name", name)])


def _step_location(case: TestCase, step: object) -> str:
    location = classify(case.uri)
    if isinstance(step, PickleStep) and step.line:
        return location_hint(location, Position(step.line))
    return location_hint(location)


def _outcome(timestamp: str, result: Result, label: str, strict: bool) -> list[str]:
    """Return the ignored/failed marker for *result*, if it needs one."""
    if result.status == Status.PENDING:
        return [
            render(
                "testIgnored",
                [("timestamp", timestamp), ("message", SKIPPED_MESSAGE), ("name", label)],
            )
        ]
    error = result.error
    if result.status.is_ok(strict) and error is None:
        return []

    attributes: list[tuple[str, object]] = [
        ("timestamp", timestamp),
        ("duration", result.duration_ms),
        ("details", error.details if error is not None else None),
        ("message", error.message if error is not None else None),
        ("name", label),
    ]
    if error is not None and error.is_comparison:
        attributes.append(("expected", error.expected))
        attributes.append(("actual", error.actual))
    return [render("testFailed", attributes)]
