# src/rsynckit/errors.py
"""
Exception types raised by rsynckit.

Configuration problems are raised by the call that caused them. Execution
problems are never raised from ``execute`` itself; they are set on the
run's future instead.
"""

from typing import Optional


class RsyncKitError(Exception):
    """Base class for all rsynckit specific errors."""


class ConfigurationError(RsyncKitError, TypeError):
    """Raised when a setter receives a value of an unsupported type."""


class PatternError(RsyncKitError, ValueError):
    """Raised when an include/exclude pattern has no valid action sign."""


class ExecutionError(RsyncKitError):
    """Base class for failures reported through a run's future."""

    def __init__(self, message: str, exit_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class SpawnError(ExecutionError):
    """The process could not be started. Never carries an exit code."""

    def __init__(self, message: str) -> None:
        super().__init__(message, exit_code=None)


class ExitError(ExecutionError):
    """The process ran but exited with a nonzero status."""

    def __init__(self, exit_code: int, executable: str = "rsync") -> None:
        super().__init__(f"{executable} exited with code {exit_code}", exit_code=exit_code)
        self.executable = executable
