"""
Overlay narration bus.

A small publish/subscribe channel between the engine and whatever renders the
narration overlay. The engine shows and hides messages; the overlay UI requests
cancel, continue or open-chat. Nothing is persisted.
"""

from dataclasses import dataclass, replace
from typing import Callable, Optional

import structlog

logger = structlog.get_logger(__name__)

Listener = Callable[[], None]


@dataclass(frozen=True)
class OverlayState:
    """What the overlay currently shows."""
    message: Optional[str] = None
    waiting: bool = False


class OverlayBus:
    """Process-wide narration channel owned by a chart session."""

    def __init__(self) -> None:
        self._state = OverlayState()
        self._message_listeners: list[Callable[[OverlayState], None]] = []
        self._cancel_listeners: list[Listener] = []
        self._continue_listeners: list[Listener] = []
        self._open_chat_listeners: list[Listener] = []

    @property
    def state(self) -> OverlayState:
        return self._state

    def _notify(self) -> None:
        for listener in list(self._message_listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.warning("Overlay message listener raised", error=str(e),
                               error_type=type(e).__name__)

    def show_overlay_message(self, message: str, waiting_for_continue: bool = False) -> None:
        self._state = OverlayState(message=message, waiting=bool(waiting_for_continue))
        self._notify()

    def set_overlay_waiting(self, waiting: bool) -> None:
        self._state = replace(self._state, waiting=waiting)
        self._notify()

    def hide_overlay_message(self) -> None:
        self._state = OverlayState()
        self._notify()

    def on_overlay_message(self, listener: Callable[[OverlayState], None]) -> None:
        self._message_listeners.append(listener)

    def off_overlay_message(self, listener: Callable[[OverlayState], None]) -> None:
        _remove(self._message_listeners, listener)

    def request_cancel_overlay_flow(self) -> None:
        """Ask every running flow to stop at its next checkpoint."""
        logger.info("Overlay cancel requested", listeners=len(self._cancel_listeners))
        for listener in list(self._cancel_listeners):
            listener()

    def on_overlay_cancel(self, listener: Listener) -> None:
        self._cancel_listeners.append(listener)

    def off_overlay_cancel(self, listener: Listener) -> None:
        _remove(self._cancel_listeners, listener)

    def request_continue_overlay_flow(self) -> None:
        """Release waiting flows and clear the waiting indicator."""
        for listener in list(self._continue_listeners):
            listener()
        self.set_overlay_waiting(False)

    def on_overlay_continue(self, listener: Listener) -> None:
        self._continue_listeners.append(listener)

    def off_overlay_continue(self, listener: Listener) -> None:
        _remove(self._continue_listeners, listener)

    def request_open_chat(self) -> None:
        for listener in list(self._open_chat_listeners):
            listener()

    def on_overlay_open_chat(self, listener: Listener) -> None:
        self._open_chat_listeners.append(listener)

    def off_overlay_open_chat(self, listener: Listener) -> None:
        _remove(self._open_chat_listeners, listener)

    def listener_counts(self) -> dict[str, int]:
        """Number of subscribers per channel."""
        return {
            "message": len(self._message_listeners),
            "cancel": len(self._cancel_listeners),
            "continue": len(self._continue_listeners),
            "open_chat": len(self._open_chat_listeners),
        }


def _remove(listeners: list, listener: Callable) -> None:
    if listener in listeners:
        listeners.remove(listener)
