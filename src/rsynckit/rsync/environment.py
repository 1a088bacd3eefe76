# src/rsynckit/rsync/environment.py
"""
Checks whether the rsync executable can be started with a given
environment, including platform-specific PATH adjustments on Windows.
"""

import logging
import os
import shlex
import sys
import shutil
import typing

logger = logging.getLogger(__name__)


class RsyncEnvironmentChecker:
    """
    Locates an executable the way the shell would, but against an explicit
    environment and working directory instead of the current process's.
    """

    def __init__(
        self,
        env: typing.Optional[typing.Mapping[str, str]] = None,
        cwd: typing.Optional[str] = None,
        platform: str = sys.platform,
    ) -> None:
        """
        Args:
            env: Environment the process will run with. Only PATH (and
                 ProgramFiles on Windows) is consulted.
            cwd: Working directory relative executable paths resolve against.
            platform: sys.platform style name; defaults to sys.platform.
        """
        self._env: typing.Dict[str, str] = dict(env or {})
        self._cwd = cwd
        self._platform = platform

    @property
    def env(self) -> typing.Dict[str, str]:
        return dict(self._env)

    def add_git_to_path_windows(self) -> None:
        """
        Adds Git's usr/bin directory to the PATH of the checked environment
        on Windows if rsync.exe is found there. This is a common location
        for rsync when Git for Windows is installed.
        """
        if self._platform != "win32":
            return

        program_files = self._env.get("ProgramFiles", "C:\\Program Files")
        git_path = os.path.join(program_files, "Git", "usr", "bin")
        if not os.path.exists(os.path.join(git_path, "rsync.exe")):
            logger.debug("rsync.exe not found in standard Git bin directory.")
            return

        current_path = self._env.get("PATH", "")
        if git_path not in current_path.split(os.pathsep):
            logger.info("Adding Git bin directory to PATH: %s", git_path)
            self._env["PATH"] = f"{current_path}{os.pathsep}{git_path}" if current_path else git_path

    def locate(self, executable: str) -> typing.Optional[str]:
        """
        Returns the full path of an executable, or None if it cannot be run.

        Names containing a path separator are resolved against the working
        directory and must exist and be executable. Bare names are searched
        on the environment's PATH.
        """
        if os.path.dirname(executable):
            path = executable
            if not os.path.isabs(path) and self._cwd:
                path = os.path.join(self._cwd, path)
            if os.path.isfile(path) and os.access(path, os.X_OK):
                return path
            return None
        return shutil.which(executable, path=self._env.get("PATH", os.defpath))

    def command_program(self, command: str) -> str:
        """
        Returns the program a shell command line starts, so that
        "ionice -c3 rsync" or a quoted path with spaces can be located.
        A leading ~ expands to the environment's HOME.
        """
        posix = self._platform != "win32"
        try:
            words = shlex.split(command, posix=posix)
        except ValueError:
            logger.debug("Cannot split command %r, locating it as a whole", command)
            return command
        if not words:
            return command
        program = words[0] if posix else words[0].strip('"')
        if program == "~" or program.startswith("~/"):
            home = self._env.get("HOME")
            program = home + program[1:] if home else os.path.expanduser(program)
        return program

    def get_status(self, executable: str = "rsync") -> typing.Tuple[bool, str]:
        """
        Checks if the executable is available.

        Returns:
            A tuple containing:
                - bool: True if the executable is found, False otherwise.
                - str: A status message describing the result.
        """
        self.add_git_to_path_windows()

        path = self.locate(self.command_program(executable))
        if path is None:
            message = f"{executable} not found in PATH or not executable"
            logger.warning(message)
            return False, message
        message = f"{executable} found at {path}"
        logger.debug(message)
        return True, message
