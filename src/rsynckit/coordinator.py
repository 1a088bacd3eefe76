# src/rsynckit/coordinator.py
"""
The Rsync builder: a fluent interface that configures a command, renders
its arguments and runs it.

    rsync = (Rsync()
             .set_flags("avz")
             .exclude(".git", "*.tmp")
             .source("/path/to/source/")
             .destination("server:backup/"))
    runner = rsync.execute(stdout_handler=print)
    runner.future.add_done_callback(...)

Alternatively a command can be set up from a plain mapping with Rsync.build.
"""

import logging
import os
from typing import Any, Callable, List, Mapping, Optional, Set, Tuple

from rsynckit.config import MULTI_OPTIONS, SHORTHAND_OPTIONS, VALUE_OPTIONS, OutputHandler, ProcessConfig
from rsynckit.rsync.command import RsyncCommandBuilder
from rsynckit.rsync.environment import RsyncEnvironmentChecker
from rsynckit.rsync.escaping import EscapeSpec
from rsynckit.rsync.runner import RsyncRunner
from rsynckit.state_manager import CommandState, Many

logger = logging.getLogger(__name__)

_UNSET: Any = object()

# Public methods that Rsync.build never dispatches to
_NOT_BUILDABLE = frozenset({"build", "execute", "command", "args", "check_executable", "state"})


class Rsync:
    """
    Configures and executes a single rsync command.

    Setters return the instance so calls can be chained. Accessors such as
    destination() or source() act as getters when called without a value.
    """

    def __init__(
        self,
        process_config: Optional[ProcessConfig] = None,
        escape: EscapeSpec = True,
        platform: Optional[str] = None,
        debug: bool = False,
    ) -> None:
        """
        Args:
            process_config: Executable, working directory, environment and
                            output handlers. Defaults to values captured from
                            the current process.
            escape: Escaping applied to option values and paths (see
                    rsynckit.rsync.escaping.resolve_escape).
            platform: Platform used for path normalization, defaults to
                      sys.platform.
            debug: Log every configuration change at DEBUG level.
        """
        self._process_config = process_config or ProcessConfig.from_environment()
        self._state = CommandState(debug=debug)
        self._command_builder = RsyncCommandBuilder(escape=escape, platform=platform)
        # Keeps runners (and their QProcess) alive until they settle
        self._active_runners: Set[RsyncRunner] = set()

    @classmethod
    def build(cls, config: Mapping[str, Any], **kwargs: Any) -> "Rsync":
        """
        Builds a command from a mapping of method names to values.

        Every key naming a builder method is called with its value, in the
        mapping's order. Unknown keys are ignored.

            Rsync.build({"source": "/a", "destination": "/b", "flags": "avz"})
        """
        command = cls(**kwargs)
        for key, value in config.items():
            if key.startswith("_") or key in _NOT_BUILDABLE:
                logger.debug("Ignoring build key %r", key)
                continue
            method = getattr(command, key, None)
            if callable(method):
                method(value)
            else:
                logger.debug("Ignoring build key %r", key)
        return command

    @property
    def state(self) -> CommandState:
        return self._state

    # --- Options ---

    def set(self, name: str, value: Any = None) -> "Rsync":
        """Sets an option. Leading dashes in the name are ignored."""
        self._state.set(name, value)
        return self

    def unset(self, name: str) -> "Rsync":
        self._state.unset(name)
        return self

    def is_set(self, name: str) -> bool:
        return self._state.is_set(name)

    def option_value(self, name: str) -> Any:
        """Returns NO_VALUE for a valueless option and None if the option is not set."""
        return self._state.option_value(name)

    def set_flags(self, *flags: Many) -> "Rsync":
        """
        Sets single letter flags.

            rsync.set_flags("avz")
            rsync.set_flags("a", "v", "z")
            rsync.set_flags(["a", "v", "z"])
        """
        self._state.set_flags(*flags)
        return self

    def unset_flags(self, *flags: Many) -> "Rsync":
        self._state.unset_flags(*flags)
        return self

    def flags(self, *flags: Many) -> "Rsync":
        return self.set_flags(*flags)

    # --- Sources, destination and filters ---

    def source(self, *values: Many) -> Any:
        """Adds one or more sources, or returns the list of sources when called without any."""
        if not values:
            return self._state.sources
        for value in values:
            self._state.add_source(value)
        return self

    def destination(self, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return self._state.destination
        self._state.set_destination(value)
        return self

    def include(self, *patterns: Many) -> "Rsync":
        self._state.add_includes(*patterns)
        return self

    def exclude(self, *patterns: Many) -> "Rsync":
        self._state.add_excludes(*patterns)
        return self

    def patterns(self, *entries: Any) -> Any:
        """
        Adds filter rules in order, or returns them when called without any.

        Entries are '+pattern' / '-pattern' strings, mappings with 'action'
        and 'pattern' keys, Pattern tuples, or lists of those.

            rsync.patterns(["-.git", {"action": "+", "pattern": "/src/*.py"}])
        """
        if not entries:
            return self._state.patterns
        self._state.add_patterns(*entries)
        return self

    # --- Process configuration ---

    def executable(self, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return self._process_config.executable
        self._process_config.executable = value
        return self

    def cwd(self, value: Any = _UNSET) -> Any:
        """Gets or sets the working directory of the rsync process."""
        if value is _UNSET:
            return self._process_config.cwd
        if value:
            self._process_config.cwd = os.path.abspath(value)
        return self

    def env(self, value: Any = _UNSET) -> Any:
        """Gets or sets the environment the rsync process runs with. None leaves it unchanged."""
        if value is _UNSET:
            return self._process_config.env
        if value is not None:
            self._process_config.env = dict(value)
        return self

    def debug(self, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return self._state.debug_mode
        self._state.set_debug_mode(bool(value))
        return self

    def register_output_handlers(
        self,
        stdout: Optional[OutputHandler] = None,
        stderr: Optional[OutputHandler] = None,
    ) -> "Rsync":
        """
        Registers the functions called with each chunk of output.

        A single (stdout, stderr) pair is accepted as the first argument so
        the handlers can be passed through Rsync.build.
        """
        if stderr is None and isinstance(stdout, (list, tuple)):
            stdout, stderr = stdout
        if callable(stdout):
            self._process_config.stdout_handler = stdout
        if callable(stderr):
            self._process_config.stderr_handler = stderr
        return self

    output = register_output_handlers

    # --- Rendering ---

    def args(self) -> List[str]:
        """Returns the argument list for the rsync executable."""
        return self._command_builder.build_args(
            self._state.options,
            self._state.patterns,
            self._state.sources,
            self._state.destination,
        )

    def command(self) -> str:
        """Returns the command line that execute() hands to the shell."""
        return self._command_builder.build_command_text(self._process_config.executable, self.args())

    def __str__(self) -> str:
        return self.command()

    # --- Execution ---

    def check_executable(self) -> Tuple[bool, str]:
        """Checks whether the configured executable can be found with the configured environment."""
        checker = RsyncEnvironmentChecker(
            env=self._process_config.env,
            cwd=self._process_config.cwd,
            platform=self._command_builder.platform,
        )
        return checker.get_status(self._process_config.executable)

    def execute(
        self,
        stdout_handler: Optional[OutputHandler] = None,
        stderr_handler: Optional[OutputHandler] = None,
    ) -> RsyncRunner:
        """
        Starts rsync and returns its runner.

        The runner's future resolves with None when rsync exits with status
        0 and fails with SpawnError or ExitError otherwise. Handlers given
        here replace the registered ones for this run only.
        """
        config = self._process_config
        runner = RsyncRunner(
            config.executable,
            self.args(),
            cwd=config.cwd,
            env=config.env,
            stdout_handler=stdout_handler or config.stdout_handler,
            stderr_handler=stderr_handler or config.stderr_handler,
            platform=self._command_builder.platform,
        )
        self._active_runners.add(runner)
        runner.future.add_done_callback(lambda _future: self._active_runners.discard(runner))
        runner.start()
        return runner


# --- Shorthand methods ---

def _toggle_option(option: str, name: str) -> Callable[..., Rsync]:
    def toggle(self: Rsync, enabled: bool = True) -> Rsync:
        return self.set(option) if enabled else self.unset(option)
    toggle.__name__ = name
    toggle.__doc__ = f"Sets the {'-' if len(option) == 1 else '--'}{option} flag, or unsets it when enabled is False."
    return toggle


def _value_option(option: str, name: str) -> Callable[..., Any]:
    def accessor(self: Rsync, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return self.option_value(option)
        return self.set(option, value) if value else self.unset(option)
    accessor.__name__ = name
    accessor.__doc__ = f"Gets or sets the --{option} option. A falsy value unsets it."
    return accessor


def _multi_option(option: str, name: str) -> Callable[..., Any]:
    def accumulator(self: Rsync, value: Any = _UNSET) -> Any:
        if value is _UNSET:
            return self.option_value(option)
        self.state.append_value(option, value)
        return self
    accumulator.__name__ = name
    accumulator.__doc__ = f"Adds values to the --{option} option, or returns them. A falsy value unsets it."
    return accumulator


def _expose_options() -> None:
    for name, option in SHORTHAND_OPTIONS:
        setattr(Rsync, name, _toggle_option(option, name))
    for name, option in VALUE_OPTIONS:
        setattr(Rsync, name, _value_option(option, name))
    for name, option in MULTI_OPTIONS:
        setattr(Rsync, name, _multi_option(option, name))


_expose_options()


def build(config: Mapping[str, Any], **kwargs: Any) -> Rsync:
    """Shortcut for Rsync.build."""
    return Rsync.build(config, **kwargs)
