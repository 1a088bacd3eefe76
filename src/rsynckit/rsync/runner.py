# src/rsynckit/rsync/runner.py
"""
Runs a single rsync command line through the shell with QProcess and
reports the outcome through a future.
"""

import codecs
import logging
import os
import sys
from concurrent.futures import Future
from enum import Enum, auto
from typing import Any, Dict, List, Mapping, Optional

from PySide6.QtCore import QEventLoop, QObject, QProcess, QProcessEnvironment, QTimer, Signal, Slot

from rsynckit.config import OutputHandler, noop
from rsynckit.errors import ExecutionError, ExitError, SpawnError
from rsynckit.rsync.command import RsyncCommandBuilder
from rsynckit.rsync.environment import RsyncEnvironmentChecker

logger = logging.getLogger(__name__)

# Grace period between terminate() and kill() when interrupting
INTERRUPT_TIMEOUT_MS = 2000


class ExecutionStatus(Enum):
    """Lifecycle of a single run."""
    IDLE = auto()
    SPAWNED = auto()
    SUCCEEDED = auto()
    FAILED = auto()


class RsyncRunner(QObject):
    """
    Executes one rsync command and settles a future with its outcome.

    The command text is handed to a shell (/bin/sh -c, or cmd.exe /c on
    Windows) because the arguments already carry shell quoting. Output is
    decoded as UTF-8 and passed chunk by chunk to the output handlers and
    the matching signals as it arrives.

    The future resolves with None on exit status 0 and fails with
    SpawnError when the process cannot be started or ExitError on a
    nonzero status. It settles exactly once; process events arriving
    afterwards are ignored. A Qt event loop must be running (or wait()
    called) for the run to make progress.
    """
    stdout_received = Signal(str)
    stderr_received = Signal(str)
    finished = Signal(bool)  # success: True/False

    def __init__(
        self,
        executable: str,
        args: List[str],
        cwd: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
        stdout_handler: OutputHandler = noop,
        stderr_handler: OutputHandler = noop,
        platform: str = sys.platform,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._executable = executable
        self._args = list(args)
        self._cwd = cwd
        self._env = dict(env) if env is not None else None
        self._stdout_handler = stdout_handler
        self._stderr_handler = stderr_handler
        self._platform = platform
        self._command = RsyncCommandBuilder.build_command_text(executable, self._args)

        self._status = ExecutionStatus.IDLE
        self._future: "Future[None]" = Future()
        self._process: Optional[QProcess] = None
        self._environment: Dict[str, str] = {}
        self._stdout_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._stderr_decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def command(self) -> str:
        return self._command

    @property
    def future(self) -> "Future[None]":
        return self._future

    @property
    def process(self) -> Optional[QProcess]:
        """The underlying QProcess, for callers that need their own timeout or cancellation."""
        return self._process

    @property
    def environment(self) -> Dict[str, str]:
        """Environment the process is launched with, empty until start()."""
        return dict(self._environment)

    @property
    def status(self) -> ExecutionStatus:
        return self._status

    def is_running(self) -> bool:
        return self._status is ExecutionStatus.SPAWNED

    def start(self) -> "Future[None]":
        """
        Launches the process and returns the future for its outcome.

        Launch failures are reported through the future, never raised.
        """
        if self._status is not ExecutionStatus.IDLE:
            raise RuntimeError("RsyncRunner can only be started once")

        self._future.set_running_or_notify_cancel()
        self._status = ExecutionStatus.SPAWNED
        logger.info("Running command: %s", self._command)

        # Launch with the environment the check ran against
        checker = RsyncEnvironmentChecker(
            env=self._env if self._env is not None else os.environ,
            cwd=self._cwd,
            platform=self._platform,
        )
        available, message = checker.get_status(self._executable)
        self._environment = checker.env
        if not available:
            self._settle(SpawnError(f"Failed to start '{self._executable}': {message}"))
            return self._future

        process = QProcess(self)
        if self._cwd:
            process.setWorkingDirectory(self._cwd)
        process_env = QProcessEnvironment()
        for key, value in self._environment.items():
            process_env.insert(key, value)
        process.setProcessEnvironment(process_env)

        process.readyReadStandardOutput.connect(self._read_stdout)
        process.readyReadStandardError.connect(self._read_stderr)
        process.errorOccurred.connect(self._handle_error)
        process.finished.connect(self._handle_finished)

        if self._platform == "win32":
            shell = self._environment.get("COMSPEC", "cmd.exe")
            process.setProgram(shell)
            process.setNativeArguments(f'/d /s /c "{self._command}"')
        else:
            process.setProgram("/bin/sh")
            process.setArguments(["-c", self._command])

        self._process = process
        process.start()
        return self._future

    def interrupt(self) -> None:
        """Terminates the running process, killing it if it does not stop in time."""
        process = self._process
        if process is None or process.state() == QProcess.ProcessState.NotRunning:
            logger.info("No active rsync process to interrupt or already finished.")
            return

        logger.warning("Interrupt requested. Attempting to stop rsync...")
        process.terminate()
        if not process.waitForFinished(INTERRUPT_TIMEOUT_MS):
            logger.warning("Rsync did not terminate gracefully, killing it.")
            process.kill()
            process.waitForFinished(INTERRUPT_TIMEOUT_MS)

    def wait(self, timeout: Optional[float] = None) -> None:
        """
        Blocks in a local event loop until the run settles and returns its
        result, raising the run's error if it failed.

        Raises concurrent.futures.TimeoutError if the run has not settled
        after timeout seconds.
        """
        if not self._future.done():
            loop = QEventLoop()
            self._future.add_done_callback(lambda _future: loop.quit())
            timer: Optional[QTimer] = None
            if timeout is not None:
                timer = QTimer()
                timer.setSingleShot(True)
                timer.timeout.connect(loop.quit)
                timer.start(int(timeout * 1000))
            if not self._future.done():
                loop.exec()
            if timer is not None:
                timer.stop()
        return self._future.result(timeout=0)

    # --- QProcess slots ---

    @Slot()
    def _read_stdout(self) -> None:
        if self._future.done() or self._process is None:
            return
        self._deliver(bytes(self._process.readAllStandardOutput().data()), self._stdout_decoder,
                      self._stdout_handler, self.stdout_received)

    @Slot()
    def _read_stderr(self) -> None:
        if self._future.done() or self._process is None:
            return
        self._deliver(bytes(self._process.readAllStandardError().data()), self._stderr_decoder,
                      self._stderr_handler, self.stderr_received)

    @Slot(QProcess.ProcessError)
    def _handle_error(self, error: QProcess.ProcessError) -> None:
        if self._future.done():
            return
        if error == QProcess.ProcessError.FailedToStart:
            message = self._process.errorString() if self._process is not None else "unknown error"
            self._settle(SpawnError(f"Failed to start '{self._executable}': {message}"))
        else:
            # Crashes are reported by finished(); read/write errors do not end the run
            logger.debug("QProcess reported %s while running %s", error, self._command)

    @Slot(int, QProcess.ExitStatus)
    def _handle_finished(self, exit_code: int, exit_status: QProcess.ExitStatus) -> None:
        if self._future.done():
            return
        try:
            self._read_stdout()
            self._read_stderr()
            self._flush(self._stdout_decoder, self._stdout_handler, self.stdout_received)
            self._flush(self._stderr_decoder, self._stderr_handler, self.stderr_received)
        finally:
            if exit_status == QProcess.ExitStatus.CrashExit:
                logger.warning("Process terminated abnormally: %s", self._command)
                # No usable exit code after a crash or a signal
                self._settle(ExitError(exit_code or -1, self._executable_name()))
            elif exit_code != 0:
                self._settle(ExitError(exit_code, self._executable_name()))
            else:
                self._settle(None)

    # --- Helpers ---

    def _deliver(self, data: bytes, decoder: Any, handler: OutputHandler, signal: Any) -> None:
        if not data:
            return
        text = decoder.decode(data)
        if text:
            handler(text)
            signal.emit(text)

    def _flush(self, decoder: Any, handler: OutputHandler, signal: Any) -> None:
        text = decoder.decode(b"", final=True)
        if text:
            handler(text)
            signal.emit(text)

    def _executable_name(self) -> str:
        return os.path.basename(self._executable) or self._executable

    def _settle(self, error: Optional[ExecutionError]) -> None:
        if self._future.done():
            return
        if error is None:
            self._status = ExecutionStatus.SUCCEEDED
            logger.info("Command completed successfully: %s", self._command)
            self._future.set_result(None)
            self.finished.emit(True)
        else:
            self._status = ExecutionStatus.FAILED
            logger.error("Command failed: %s (%s)", self._command, error)
            self._future.set_exception(error)
            self.finished.emit(False)

