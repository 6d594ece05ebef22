"""
Journal input configuration.

Holds the options that control where tailing starts, how records are
shaped and where the read position is persisted.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from journaltail.utils.config import Config
from journaltail.utils.logging import get_logger

logger = get_logger(__name__)

SINCEDB_FILENAME = ".sincedb_journal"
DEFAULT_JOURNAL_PATH = "/var/log/journal"


class ConfigurationError(Exception):
    """Raised when the input cannot be configured."""
    pass


class SeekTo(str, Enum):
    """Fresh-start position in the journal."""
    HEAD = "head"  # Oldest retained entry
    TAIL = "tail"  # Only entries appended from now on


class StaleCursorPolicy(str, Enum):
    """What to do when a saved cursor no longer resolves."""
    FAIL = "fail"
    HEAD = "head"
    TAIL = "tail"


# sd_journal_open flags
JOURNAL_FLAGS = {
    0: "all",
    1: "local_only",
    2: "runtime_only",
    4: "system_only",
}


def _positive_seconds(name: str, value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(
            f"Invalid {name} {value!r}, expected a number of seconds"
        ) from None

    if seconds <= 0:
        raise ConfigurationError(f"{name} must be positive")

    return seconds


@dataclass
class JournalInputConfig:
    """
    Configuration for the journal input.

    Attributes:
        seekto: Fresh-start position (head or tail)
        flags: Journal availability scope (0, 1, 2 or 4)
        path: Directory to read journal files from
        filter: Field/value pairs every entry must match on a fresh start
        thisboot: Restrict a fresh start to entries from the current boot
        pretty_keys: Rename reserved UPPERCASE fields to readable names
        sincedb_path: File holding the persisted cursor (derived if unset)
        sincedb_write_interval: Seconds between checkpoint attempts
        wait_timeout: Upper bound in seconds on a single blocking wait
        on_stale_cursor: Policy when the saved cursor cannot be sought to
    """
    seekto: str = SeekTo.TAIL
    flags: int = 0
    path: Optional[str] = DEFAULT_JOURNAL_PATH
    filter: Dict[str, str] = field(default_factory=dict)
    thisboot: bool = True
    pretty_keys: bool = False
    sincedb_path: Optional[str] = None
    sincedb_write_interval: float = 15
    wait_timeout: float = 1.0
    on_stale_cursor: str = StaleCursorPolicy.FAIL

    def __post_init__(self):
        try:
            self.seekto = SeekTo(self.seekto)
        except ValueError:
            raise ConfigurationError(
                f"Invalid seekto {self.seekto!r}, expected 'head' or 'tail'"
            ) from None

        try:
            self.on_stale_cursor = StaleCursorPolicy(self.on_stale_cursor)
        except ValueError:
            raise ConfigurationError(
                f"Invalid on_stale_cursor {self.on_stale_cursor!r}, "
                f"expected 'fail', 'head' or 'tail'"
            ) from None

        if not isinstance(self.flags, int) or self.flags not in JOURNAL_FLAGS:
            raise ConfigurationError(
                f"Invalid flags {self.flags!r}, expected one of {sorted(JOURNAL_FLAGS)}"
            )

        self.sincedb_write_interval = _positive_seconds(
            "sincedb_write_interval", self.sincedb_write_interval
        )
        self.wait_timeout = _positive_seconds("wait_timeout", self.wait_timeout)

        if not isinstance(self.filter, Mapping):
            raise ConfigurationError("filter must be a mapping of field to value")

        self.filter = {str(k): str(v) for k, v in self.filter.items()}

    def resolve_sincedb_path(self, environ: Optional[Mapping[str, str]] = None) -> Path:
        """
        Get the sincedb path, deriving it from the environment if unset.

        The derived location is ``$SINCEDB_DIR/.sincedb_journal``, falling
        back to ``$HOME/.sincedb_journal``.

        Args:
            environ: Environment to consult (defaults to os.environ)

        Returns:
            Path of the sincedb file

        Raises:
            ConfigurationError: If no path is set and neither variable exists
        """
        if self.sincedb_path:
            return Path(self.sincedb_path)

        environ = os.environ if environ is None else environ
        sincedb_dir = environ.get("SINCEDB_DIR") or environ.get("HOME")

        if not sincedb_dir:
            logger.error(
                "No SINCEDB_DIR or HOME environment variable set, cannot decide "
                "where to keep the journal position. Set HOME or SINCEDB_DIR, "
                "or set sincedb_path explicitly",
                path=self.path,
            )
            raise ConfigurationError("Sincedb can not be created")

        sincedb_path = Path(sincedb_dir) / SINCEDB_FILENAME

        logger.info(
            "No sincedb_path set, generating one for the journal",
            sincedb_path=str(sincedb_path),
        )

        return sincedb_path

    @classmethod
    def from_config(cls, config: Config, **overrides: Any) -> "JournalInputConfig":
        """
        Build from the ``input.journald`` section of a Config.

        Args:
            config: Loaded configuration
            **overrides: Values taking precedence over the file (None is ignored)

        Returns:
            Validated input configuration
        """
        known = set(cls.__dataclass_fields__)
        section = config.section("input.journald")

        unknown = set(section) - known
        if unknown:
            logger.warning("Ignoring unknown journald options", options=sorted(unknown))

        values = {k: v for k, v in section.items() if k in known}
        values.update({k: v for k, v in overrides.items() if v is not None})

        return cls(**values)
