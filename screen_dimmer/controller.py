"""
Dimmer Controller - debounced apply and reset
=============================================

Turns slider changes into redshift invocations:

- every change cancels the pending delay and any running command,
  snapshots the three values and restarts the debounce timer
- when the timer fires, the snapshot is applied on a worker thread
- reset runs ``redshift -x`` on a worker thread and restores defaults

Only the interaction thread mutates ``_timer`` and ``_current_token``.
Results come back through the UpdateQueue.
"""

import logging
import threading
from typing import Callable, Optional

from .dispatch import UpdateQueue
from .parameters import DEFAULT_SETTINGS, ParameterModel, Settings
from .redshift import CancelToken, CommandResult, RedshiftRunner

logger = logging.getLogger(__name__)


DEFAULT_DEBOUNCE_MS = 250


class PendingApply:
    """One scheduled-or-running apply: snapshot, delay timer and token."""

    def __init__(self, settings: Settings, timer: threading.Timer, token: CancelToken):
        self.settings = settings
        self.timer = timer
        self.token = token

    def cancel(self):
        self.timer.cancel()
        self.token.cancel()


class DimmerController:
    """
    Coordinates the parameter model, the redshift runner and the UI.

    Args:
        model: Parameter model; its change listener drives the debounce
        runner: RedshiftRunner used for apply and reset
        updates: Queue drained by the interaction thread
        status_callback: Called with status text on the interaction thread
        debounce_ms: Delay before a change is applied
    """

    def __init__(
        self,
        model: ParameterModel,
        runner: RedshiftRunner,
        updates: UpdateQueue,
        status_callback: Optional[Callable[[str], None]] = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ):
        self.model = model
        self.runner = runner
        self.updates = updates
        self.debounce_ms = debounce_ms
        self._status_callback = status_callback
        self._pending: Optional[PendingApply] = None
        self._current_token: Optional[CancelToken] = None
        self.status_text = ""

        model.add_change_listener(self._on_model_changed)

    def set_status_callback(self, callback: Callable[[str], None]):
        self._status_callback = callback

    def _on_model_changed(self, name: str, value: float):
        logger.debug(f"{name} changed to {value}")
        self.on_parameter_changed()

    # Debounce

    def on_parameter_changed(self):
        """Supersede any pending or running apply and restart the debounce delay."""
        if self.model.is_suppressed:
            return
        self._cancel_current()

        settings = self.model.snapshot()
        token = CancelToken()
        timer = threading.Timer(self.debounce_ms / 1000.0, self._on_debounce_elapsed, args=(settings, token))
        timer.daemon = True
        self._pending = PendingApply(settings, timer, token)
        self._current_token = token
        timer.start()

    def _on_debounce_elapsed(self, settings: Settings, token: CancelToken):
        # Timer thread
        if token.cancelled:
            return
        self._start_worker(self._apply_worker, settings, token, name="redshift-apply")

    def _apply_worker(self, settings: Settings, token: CancelToken):
        result = self.runner.apply(settings, token)
        if result.superseded:
            logger.debug(f"Discarded superseded apply: {settings}")
            return
        self.updates.post(lambda: self._deliver(result, token))

    # Reset

    def reset(self):
        """Run redshift -x off-thread, then restore defaults under suppression."""
        if self._current_token is not None:
            self._current_token.cancel()
        token = CancelToken()
        self._current_token = token
        self._start_worker(self._reset_worker, token, name="redshift-reset")

    def _reset_worker(self, token: CancelToken):
        result = self.runner.reset(token)
        # Defaults are restored even when superseded; only the status is dropped
        self.updates.post(lambda: self._finish_reset(result, token))

    def _finish_reset(self, result: CommandResult, token: CancelToken):
        # Interaction thread
        self.model.restore(DEFAULT_SETTINGS)
        if result.superseded:
            logger.debug("Reset superseded, defaults restored without status")
            return
        self._deliver(result, token)

    # Shared

    def _cancel_current(self):
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        if self._current_token is not None:
            self._current_token.cancel()
            self._current_token = None

    def _start_worker(self, target: Callable, *args, name: str):
        worker = threading.Thread(target=target, args=args, name=name, daemon=True)
        worker.start()
        return worker

    def _deliver(self, result: CommandResult, token: CancelToken):
        # Interaction thread: a token cancelled after the result was posted is stale
        if token.cancelled:
            logger.debug(f"Dropped stale {result.mode} result: {result.message}")
            return
        if token is self._current_token:
            self._current_token = None
            self._pending = None
        self.set_status(result.message)

    def set_status(self, text: str):
        self.status_text = text
        if self._status_callback:
            try:
                self._status_callback(text)
            except Exception as e:
                logger.error(f"Status callback error: {e}")

    def shutdown(self):
        """Cancel pending and running work."""
        self._cancel_current()
