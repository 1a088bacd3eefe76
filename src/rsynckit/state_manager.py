# src/rsynckit/state_manager.py
import logging
import os
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional, Union

from PySide6.QtCore import QObject, Signal

from rsynckit.errors import ConfigurationError, PatternError


class _NoValue:
    """Marker stored for options that are set without a value."""

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __bool__(self) -> bool:
        return False


NO_VALUE = _NoValue()


class PatternAction(Enum):
    INCLUDE = "+"
    EXCLUDE = "-"


class Pattern(NamedTuple):
    """A single include/exclude filter rule."""
    action: PatternAction
    pattern: str


# A single value or an arbitrarily nested list of them
Many = Union[str, "os.PathLike[str]", Iterable[Any]]


def strip_leading_dashes(name: str) -> str:
    return name.lstrip("-")


def flatten(values: Iterable[Any]) -> List[Any]:
    """Flattens nested lists/tuples into a flat list, keeping order."""
    flat: List[Any] = []
    for value in values:
        if isinstance(value, (list, tuple)) and not isinstance(value, Pattern):
            flat.extend(flatten(value))
        else:
            flat.append(value)
    return flat


def parse_action(action: Any) -> PatternAction:
    if isinstance(action, PatternAction):
        return action
    try:
        return PatternAction(action)
    except ValueError:
        raise PatternError(f"Pattern action must be '+' or '-', got {action!r}") from None


def parse_pattern(entry: Any) -> Pattern:
    """
    Converts one pattern entry into a Pattern.

    Accepted forms are a Pattern, a string whose first character is the
    action sign ('+docs', '-.git') and a mapping with 'action' and
    'pattern' keys. A sign other than '+' or '-' raises PatternError.
    """
    if isinstance(entry, Pattern):
        return Pattern(parse_action(entry.action), _pattern_text(entry.pattern))
    if isinstance(entry, str):
        return Pattern(parse_action(entry[:1]), entry[1:])
    if isinstance(entry, Mapping):
        if "action" not in entry or "pattern" not in entry:
            raise PatternError(f"Pattern mapping needs 'action' and 'pattern' keys, got {sorted(entry)!r}")
        return Pattern(parse_action(entry["action"]), _pattern_text(entry["pattern"]))
    raise ConfigurationError(f"Unsupported pattern entry of type {type(entry).__name__}")


def _pattern_text(value: Any) -> str:
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if not isinstance(value, str):
        raise ConfigurationError(f"Pattern must be a string, got {type(value).__name__}")
    return value


class CommandState(QObject):
    """
    Holds the configuration of a single rsync command.

    Options keep their insertion order and are stored under their name
    without leading dashes, so '--progress', '-progress' and 'progress'
    all refer to the same entry. Emits state_changed after every mutation.
    """
    state_changed = Signal()
    _logger = logging.getLogger(__name__)

    def __init__(self, parent: Optional[QObject] = None, debug: bool = False) -> None:
        super().__init__(parent)
        self._debug_mode: bool = debug
        self._options: Dict[str, Any] = {}
        self._patterns: List[Pattern] = []
        self._sources: List[str] = []
        self._destination: str = ""

    # --- Getters ---

    @property
    def options(self) -> Dict[str, Any]:
        return dict(self._options)

    @property
    def patterns(self) -> List[Pattern]:
        return list(self._patterns)

    @property
    def sources(self) -> List[str]:
        return list(self._sources)

    @property
    def destination(self) -> str:
        return self._destination

    @property
    def debug_mode(self) -> bool:
        return self._debug_mode

    def is_set(self, name: str) -> bool:
        return strip_leading_dashes(name) in self._options

    def option_value(self, name: str) -> Any:
        """
        Returns the value of an option.

        NO_VALUE means the option is set without a value, None means it is
        not set at all. List values are returned as a copy.
        """
        value = self._options.get(strip_leading_dashes(name))
        if isinstance(value, list):
            return list(value)
        return value

    # --- Options ---

    def set(self, name: str, value: Any = None) -> None:
        """
        Sets an option, replacing any previous value. None and True store
        NO_VALUE; False unsets the option.
        """
        name = strip_leading_dashes(name)
        if not name:
            return
        if value is False:
            self.unset(name)
            return
        if value is None or value is True:
            value = NO_VALUE
        elif isinstance(value, tuple):
            value = list(value)
        old_value = self._options.get(name)
        self._options[name] = value
        self._log_state_change(f"options.{name}", old_value, value)
        self.state_changed.emit()

    def unset(self, name: str) -> None:
        name = strip_leading_dashes(name)
        if name in self._options:
            old_value = self._options.pop(name)
            self._log_state_change(f"options.{name}", old_value, None)
            self.state_changed.emit()

    def append_value(self, name: str, value: Any) -> None:
        """
        Adds a value to an option that can be given more than once.

        A list adds each of its values in order, a falsy value clears the
        option and anything else is appended to the values already stored.
        """
        if isinstance(value, (list, tuple)):
            for item in value:
                self.append_value(name, item)
            return
        if not value:
            self.unset(name)
            return

        current = self._options.get(strip_leading_dashes(name))
        if not current:
            values = [value]
        elif not isinstance(current, list):
            values = [current, value]
        else:
            values = current + [value]
        self.set(name, values)

    def set_flags(self, *flags: Many) -> None:
        for flag in self._parse_flags(flags):
            self.set(flag)

    def unset_flags(self, *flags: Many) -> None:
        for flag in self._parse_flags(flags):
            self.unset(flag)

    @staticmethod
    def _parse_flags(flags: Iterable[Any]) -> List[str]:
        parsed: List[str] = []
        for flag in flatten(flags):
            if not isinstance(flag, str):
                raise ConfigurationError(f"Flags must be strings, got {type(flag).__name__}")
            parsed.extend(strip_leading_dashes(flag))
        return parsed

    # --- Sources and destination ---

    def add_source(self, value: Many) -> None:
        """Appends one or more sources. Sources already present are skipped."""
        if isinstance(value, (list, tuple)):
            for item in value:
                self.add_source(item)
            return
        if isinstance(value, os.PathLike):
            value = os.fspath(value)
        if not isinstance(value, str):
            raise ConfigurationError(f"Value for source must be a string, got {type(value).__name__}")
        if value not in self._sources:
            self._sources.append(value)
            self._log_state_change("sources", self._sources[:-1], self._sources)
            self.state_changed.emit()

    def set_destination(self, value: Union[str, "os.PathLike[str]"]) -> None:
        if isinstance(value, os.PathLike):
            value = os.fspath(value)
        if not isinstance(value, str):
            raise ConfigurationError(f"Value for destination must be a string, got {type(value).__name__}")
        if self._destination != value:
            self._log_state_change("destination", self._destination, value)
            self._destination = value
            self.state_changed.emit()

    # --- Patterns ---

    def add_patterns(self, *entries: Any) -> None:
        # Parse everything first so a bad entry leaves the list untouched
        self._append_patterns([parse_pattern(entry) for entry in flatten(entries)])

    def add_includes(self, *patterns: Many) -> None:
        self._append_patterns([Pattern(PatternAction.INCLUDE, _pattern_text(p)) for p in flatten(patterns)])

    def add_excludes(self, *patterns: Many) -> None:
        self._append_patterns([Pattern(PatternAction.EXCLUDE, _pattern_text(p)) for p in flatten(patterns)])

    def _append_patterns(self, patterns: List[Pattern]) -> None:
        if not patterns:
            return
        old_patterns = list(self._patterns)
        self._patterns.extend(patterns)
        self._log_state_change("patterns", old_patterns, self._patterns)
        self.state_changed.emit()

    # --- Debug Mode ---

    def set_debug_mode(self, enabled: bool) -> None:
        """Enables or disables logging of every state change at DEBUG level."""
        self._debug_mode = enabled

    def _log_state_change(self, attribute_name: str, old_value: Any, new_value: Any) -> None:
        if not self._debug_mode:
            return
        self._logger.debug("State Change: %s: %r -> %r", attribute_name, old_value, new_value)
