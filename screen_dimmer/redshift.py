"""
Redshift Runner - Interface to the redshift command-line tool
=============================================================
"""

import logging
import os
import shutil
import subprocess
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .parameters import Settings

logger = logging.getLogger(__name__)


DEFAULT_COMMAND = "redshift"
DEFAULT_METHOD = "randr"
DEFAULT_TIMEOUT = 3.0

NOT_FOUND_MESSAGE = "Error: '{tool}' not found in PATH. Install it (e.g., sudo apt install {tool})."


class Outcome(Enum):
    """How a single redshift invocation ended."""
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    SUPERSEDED = "superseded"


@dataclass
class CommandResult:
    """Classified result of one redshift invocation."""
    mode: str
    outcome: Outcome
    message: str
    returncode: Optional[int] = None
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome == Outcome.COMPLETED

    @property
    def superseded(self) -> bool:
        return self.outcome == Outcome.SUPERSEDED

    def raise_for_status(self):
        """Raise RedshiftError unless the invocation completed."""
        if not self.ok:
            raise RedshiftError(self.message, self)


class RedshiftError(Exception):
    """Exception raised when a redshift invocation does not complete."""

    def __init__(self, message: str, result: Optional[CommandResult] = None):
        super().__init__(message)
        self.result = result


class CancelToken:
    """
    Cancellation handle for one external command.

    Cancelling sets the flag and kills the attached process if it is
    still running. A token cancelled before a process is attached makes
    the runner skip the launch entirely.
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._process: Optional[subprocess.Popen] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self):
        with self._lock:
            self._event.set()
            process = self._process
        if process is not None and process.poll() is None:
            logger.debug(f"Terminating superseded process {process.pid}")
            try:
                process.kill()
            except OSError as e:
                logger.debug(f"Could not kill process {process.pid}: {e}")

    def attach(self, process: subprocess.Popen) -> bool:
        """
        Bind a running process to this token.

        Returns:
            False if the token was already cancelled (the process is killed)
        """
        with self._lock:
            if not self._event.is_set():
                self._process = process
                return True
        process.kill()
        return False

    def detach(self):
        with self._lock:
            self._process = None


@dataclass
class _Execution:
    """Raw facts about a finished process, before classification."""
    returncode: Optional[int] = None
    output: str = ""
    error: Optional[str] = None
    timed_out: bool = False
    cancelled: bool = False


class RedshiftRunner:
    """
    Runs redshift to apply or clear colour adjustments.

    Each call blocks until the process exits, is killed by its deadline or
    is cancelled through its token, so callers run it off the UI thread.
    """

    APPLY_MODE = "apply"
    RESET_MODE = "reset"

    TIMEOUT_MESSAGES = {
        APPLY_MODE: "Timed out applying settings.",
        RESET_MODE: "Timed out resetting settings.",
    }
    SUCCESS_MESSAGES = {
        APPLY_MODE: "Applied.",
        RESET_MODE: "Reset to defaults.",
    }

    # Seconds to wait for pipes to close after a kill
    KILL_GRACE = 0.5

    def __init__(
        self,
        command: str = DEFAULT_COMMAND,
        method: str = DEFAULT_METHOD,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the runner.

        Args:
            command: redshift executable name or path
            method: Adjustment backend forced with -m
            timeout: Per-invocation deadline in seconds
        """
        self.command = command
        self.method = method
        self.timeout = timeout

    @property
    def tool_name(self) -> str:
        return os.path.basename(self.command) or self.command

    def error_prefix(self, mode: str) -> str:
        """Prefix for failure messages: the tool name for apply, 'reset' for reset."""
        return self.tool_name if mode == self.APPLY_MODE else mode

    def build_apply_args(self, settings: Settings) -> List[str]:
        """Build redshift arguments for a one-shot adjustment."""
        gamma = f"{settings.gamma:.2f}"
        return [
            "-m", self.method,  # force the backend; skips probing other methods
            "-P",               # clear previous ramps so adjustments don't stack
            "-O", str(int(settings.temperature)),
            "-g", f"{gamma}:{gamma}:{gamma}",
            "-b", f"{settings.brightness:.2f}",
        ]

    def build_reset_args(self) -> List[str]:
        return ["-x"]

    def apply(self, settings: Settings, token: Optional[CancelToken] = None) -> CommandResult:
        """
        Apply temperature, brightness and gamma.

        Args:
            settings: Snapshot of the values to apply
            token: Cancellation token; a cancelled token yields SUPERSEDED

        Returns:
            Classified CommandResult
        """
        execution = self._run(self.build_apply_args(settings), token)
        return self._classify(self.APPLY_MODE, execution)

    def reset(self, token: Optional[CancelToken] = None) -> CommandResult:
        """Clear all adjustments (redshift -x)."""
        execution = self._run(self.build_reset_args(), token)
        return self._classify(self.RESET_MODE, execution)

    def _run(self, args: List[str], token: Optional[CancelToken]) -> _Execution:
        full_command = [self.command] + args
        if token is not None and token.cancelled:
            logger.debug(f"Skipping cancelled command: {' '.join(full_command)}")
            return _Execution(cancelled=True)

        logger.debug(f"Running: {' '.join(full_command)}")
        start_time = time.time()
        try:
            process = subprocess.Popen(
                full_command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            logger.warning(f"Could not start {self.tool_name}: {e}")
            return _Execution(error=str(e))

        if token is not None and not token.attach(process):
            self._collect_killed(process)
            return _Execution(cancelled=True)

        timed_out = False
        try:
            output, _ = process.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            timed_out = True
            process.kill()
            output = self._collect_killed(process)
            logger.warning(
                f"Command timed out after {self.timeout:.1f}s: {' '.join(full_command)}"
            )
        finally:
            if token is not None:
                token.detach()

        exec_time = time.time() - start_time
        logger.debug(f"Command exited with {process.returncode} in {exec_time:.2f}s")
        return _Execution(
            returncode=process.returncode,
            output=(output or "").strip(),
            timed_out=timed_out,
            cancelled=token is not None and token.cancelled,
        )

    def _collect_killed(self, process: subprocess.Popen) -> str:
        """Read what a killed process left in its pipe, waiting at most KILL_GRACE."""
        try:
            output, _ = process.communicate(timeout=self.KILL_GRACE)
            return output or ""
        except subprocess.TimeoutExpired:
            # A child of the killed process still holds the pipe open
            logger.warning(f"Gave up reading output of killed process {process.pid}")
            process.poll()
            return ""

    def _classify(self, mode: str, execution: _Execution) -> CommandResult:
        if execution.cancelled:
            return CommandResult(mode, Outcome.SUPERSEDED, "", execution.returncode, execution.output)

        if execution.timed_out:
            return CommandResult(
                mode, Outcome.TIMED_OUT, self.TIMEOUT_MESSAGES[mode],
                execution.returncode, execution.output,
            )

        failed = execution.error is not None or execution.returncode != 0
        if failed:
            if execution.output:
                detail = execution.output
            elif execution.error is not None:
                detail = execution.error
            else:
                detail = describe_returncode(execution.returncode)
            message = f"{self.error_prefix(mode)} error: {detail}"
            logger.warning(message)
            return CommandResult(mode, Outcome.FAILED, message, execution.returncode, execution.output)

        if mode == self.RESET_MODE or not execution.output:
            message = self.SUCCESS_MESSAGES[mode]
        else:
            message = execution.output
        return CommandResult(mode, Outcome.COMPLETED, message, execution.returncode, execution.output)


def describe_returncode(returncode: Optional[int]) -> str:
    """Describe a failed exit code the way a shell would."""
    if returncode is None:
        return "process did not exit"
    if returncode < 0:
        return f"terminated by signal {-returncode}"
    return f"exit status {returncode}"


def check_redshift_available(command: str = DEFAULT_COMMAND) -> Tuple[bool, str]:
    """
    Check if redshift is resolvable on PATH.

    Returns:
        Tuple of (is_available, message)
    """
    path = shutil.which(command)
    if path:
        return True, f"{command} found: {path}"
    tool = os.path.basename(command) or command
    return False, NOT_FOUND_MESSAGE.format(tool=tool)
