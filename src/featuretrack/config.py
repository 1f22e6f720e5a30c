"""Reporter settings.

Settings come from environment variables, optionally seeded from a
``.env`` file via ``python-dotenv``.  Variables already present in the
environment take precedence over the file.

Environment variables:
    FEATURETRACK_STRICT: Treat pending/undefined results as failures
        (``1/true/yes/on`` or ``0/false/no/off``).
    FEATURETRACK_OUTPUT: File to write progress messages to instead of
        standard output.
    FEATURETRACK_ENGINE_ID: Engine segment used as the root of hierarchy
        keys.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from featuretrack.hierarchy.keys import DEFAULT_ENGINE_ID

logger = logging.getLogger(__name__)

ENV_STRICT = "FEATURETRACK_STRICT"
ENV_OUTPUT = "FEATURETRACK_OUTPUT"
ENV_ENGINE_ID = "FEATURETRACK_ENGINE_ID"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class ConfigError(ValueError):
    """Raised for an invalid configuration value."""


def parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


@dataclass
class ReporterSettings:
    """Settings for a reporting run.

    Attributes:
        strict: Whether pending and undefined results count as failures.
        output: Output file path; ``None`` writes to standard output.
        engine_id: Value of the root ``engine`` hierarchy segment.
    """

    strict: bool = False
    output: str | None = None
    engine_id: str = DEFAULT_ENGINE_ID

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> ReporterSettings:
        """Create settings from *env* (defaults to ``os.environ``).

        Raises:
            ConfigError: If a variable holds an invalid value.
        """
        source = os.environ if env is None else env
        return cls(
            strict=parse_bool(ENV_STRICT, source.get(ENV_STRICT, "")),
            output=source.get(ENV_OUTPUT) or None,
            engine_id=source.get(ENV_ENGINE_ID) or DEFAULT_ENGINE_ID,
        )


def load_settings(dotenv_path: str | Path | None = None) -> ReporterSettings:
    """Load a ``.env`` file (if present) into the environment, then read settings."""
    path = Path(dotenv_path) if dotenv_path is not None else Path(".env")
    if path.is_file():
        load_dotenv(path, override=False)
        logger.debug("Loaded settings from %s", path)
    return ReporterSettings.from_env()
