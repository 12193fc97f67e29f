"""Tests for the overlay narration bus."""

from chartpilot.chart.overlay import OverlayBus, OverlayState


class TestOverlayMessages:

    def test_show_and_hide(self):
        bus = OverlayBus()
        bus.show_overlay_message("Switching to daily")
        assert bus.state == OverlayState(message="Switching to daily", waiting=False)

        bus.hide_overlay_message()
        assert bus.state == OverlayState()

    def test_show_waiting_for_continue(self):
        bus = OverlayBus()
        bus.show_overlay_message("Step 1", waiting_for_continue=True)
        assert bus.state.waiting is True

        bus.set_overlay_waiting(False)
        assert bus.state == OverlayState(message="Step 1", waiting=False)

    def test_message_listeners_receive_state(self):
        bus = OverlayBus()
        seen = []
        bus.on_overlay_message(seen.append)

        bus.show_overlay_message("hello")
        bus.hide_overlay_message()
        bus.off_overlay_message(seen.append)
        bus.show_overlay_message("ignored")

        assert [s.message for s in seen] == ["hello", None]

    def test_raising_listener_does_not_block_others(self):
        bus = OverlayBus()
        seen = []

        def broken(state):
            raise RuntimeError("render failed")

        bus.on_overlay_message(broken)
        bus.on_overlay_message(seen.append)

        bus.show_overlay_message("still delivered")
        bus.hide_overlay_message()

        assert [s.message for s in seen] == ["still delivered", None]
        assert bus.state == OverlayState()


class TestOverlayRequests:

    def test_cancel_reaches_subscribers(self):
        bus = OverlayBus()
        calls = []
        handler = lambda: calls.append("cancel")  # noqa: E731
        bus.on_overlay_cancel(handler)

        bus.request_cancel_overlay_flow()
        bus.off_overlay_cancel(handler)
        bus.request_cancel_overlay_flow()

        assert calls == ["cancel"]

    def test_continue_clears_waiting(self):
        bus = OverlayBus()
        calls = []
        bus.on_overlay_continue(lambda: calls.append("continue"))
        bus.show_overlay_message("Ready?", waiting_for_continue=True)

        bus.request_continue_overlay_flow()

        assert calls == ["continue"]
        assert bus.state.waiting is False
        assert bus.state.message == "Ready?"

    def test_open_chat(self):
        bus = OverlayBus()
        calls = []
        bus.on_overlay_open_chat(lambda: calls.append("open"))
        bus.request_open_chat()
        assert calls == ["open"]

    def test_listener_counts(self):
        bus = OverlayBus()
        handler = lambda: None  # noqa: E731
        bus.on_overlay_cancel(handler)
        bus.on_overlay_continue(handler)
        assert bus.listener_counts() == {"message": 0, "cancel": 1, "continue": 1, "open_chat": 0}

        bus.off_overlay_cancel(handler)
        bus.off_overlay_continue(handler)
        # Removing twice is harmless
        bus.off_overlay_continue(handler)
        assert bus.listener_counts()["cancel"] == 0
        assert bus.listener_counts()["continue"] == 0
