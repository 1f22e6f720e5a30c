"""TeamCity progress reporter.

Feeds lifecycle events through a :class:`ProgressReducer` and writes the
resulting service messages to a text sink, one per line.  Source-read
events are parsed into the document registry that later events are
resolved against.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from dataclasses import replace
from typing import TextIO

from featuretrack.document.parser import parse_feature_string
from featuretrack.document.registry import DocumentRegistry
from featuretrack.reporting.events import Event, EventKind, SourceRead
from featuretrack.reporting.reducer import ProgressReducer, ReporterState

logger = logging.getLogger(__name__)


class TeamCityReporter:
    """Stateful shell around :class:`ProgressReducer`.

    Events must be delivered one at a time in case order; the reporter
    does no locking of its own.
    """

    def __init__(
        self,
        registry: DocumentRegistry | None = None,
        sink: TextIO | None = None,
        strict: bool = False,
    ) -> None:
        self._registry = registry if registry is not None else DocumentRegistry()
        self._sink = sink
        self._reducer = ProgressReducer(self._registry)
        self._state = ReporterState(strict=strict)
        self._running = False
        self._aborted = False

    @property
    def registry(self) -> DocumentRegistry:
        return self._registry

    @property
    def state(self) -> ReporterState:
        return self._state

    @property
    def strict(self) -> bool:
        return self._state.strict

    def set_strict(self, strict: bool) -> None:
        """Set strict mode.  Only allowed before the run has started.

        Raises:
            RuntimeError: If called while a run is in progress.
        """
        if self._running:
            raise RuntimeError("Strict mode cannot change during a run")
        self._state = replace(self._state, strict=strict)

    def handle(self, event: Event) -> None:
        """Process a single event.

        Raises:
            DocumentNotFoundError: If the event refers to an unread document.
                Reporting is aborted for the rest of the run.
            RuntimeError: If reporting was aborted by an earlier error.
        """
        if self._aborted:
            raise RuntimeError("Reporting was aborted by an earlier error")

        if event.kind == EventKind.SOURCE_READ:
            self._read_source(event)
            return

        try:
            state, lines = self._reducer.reduce(self._state, event)
        except LookupError as exc:
            self._aborted = True
            logger.error("Aborting progress reporting: %s", exc)
            raise

        self._write(lines)
        self._state = state
        if event.kind == EventKind.RUN_STARTED:
            self._running = True
        elif event.kind == EventKind.RUN_FINISHED:
            self._running = False

    def run(self, events: Iterable[Event]) -> None:
        """Process *events* in order."""
        for event in events:
            self.handle(event)

    def _read_source(self, event: SourceRead) -> None:
        document = parse_feature_string(event.source, uri=event.uri)
        self._registry.put(event.uri, document)

    def _write(self, lines: list[str]) -> None:
        sink = self._sink if self._sink is not None else sys.stdout
        for line in lines:
            sink.write(line + "\n")
        if lines:
            sink.flush()
