from __future__ import annotations

import logging
import queue
from typing import Optional

from wakeful.core.errors import WakefulError
from wakeful.core.toggle import WakeLockToggle
from wakeful.core.types import Message, MessageKind

log = logging.getLogger(__name__)


class ToggleService:
    """
    Service host for the toggle.

    Other threads only post() messages; run() drains the queue and is the
    single thread that ever calls into the toggle.

    fallback is a renderer + notifier to switch to when the tray dies;
    without one a lost tray ends the service.
    """

    def __init__(
        self,
        inbox: "Optional[queue.Queue[Message]]" = None,
        exit_on_release: bool = False,
        fallback=None,
    ) -> None:
        self.inbox: "queue.Queue[Message]" = inbox if inbox is not None else queue.Queue()
        self.exit_on_release = exit_on_release
        self.fallback = fallback
        self.toggle: Optional[WakeLockToggle] = None
        self.foreground = False
        self._running = False

    def attach(self, toggle: WakeLockToggle) -> None:
        self.toggle = toggle

    def post(self, message: Message) -> None:
        self.inbox.put(message)

    # --- Host collaborator ---

    def keep_running(self) -> None:
        self.foreground = True

    def may_stop(self) -> None:
        self.foreground = False
        if self.exit_on_release:
            self.post(Message(MessageKind.QUIT, source="may_stop"))

    # --- control loop ---

    def _superseded(self, msg: Message) -> bool:
        # SCREEN_OFF from an older subscription must not end a newer activation
        sub = self.toggle.control.subscription
        return (
            msg.subscription_id is not None
            and sub is not None
            and getattr(sub, "id", None) != msg.subscription_id
        )

    def _surface_lost(self, msg: Message) -> bool:
        if self.fallback is None:
            log.error("%s surface lost and no fallback; stopping", msg.source or "ui")
            return False
        log.warning("%s surface lost; continuing without it", msg.source or "ui")
        self.toggle.use_surface(self.fallback, self.fallback)
        self.toggle.on_start_listening()
        return True

    def dispatch(self, msg: Message) -> bool:
        """Handle one message. Returns False once QUIT is seen."""
        if self.toggle is None:
            raise WakefulError("attach() a toggle before dispatching")
        t = self.toggle
        if msg.kind == MessageKind.QUIT:
            return False
        if msg.kind == MessageKind.TOGGLE:
            t.on_user_toggle()
        elif msg.kind == MessageKind.SCREEN_OFF:
            if self._superseded(msg):
                log.debug("dropping SCREEN_OFF from subscription %s", msg.subscription_id)
            else:
                t.on_external_event(msg.subscription_id)
        elif msg.kind == MessageKind.START_LISTENING:
            t.on_start_listening()
        elif msg.kind == MessageKind.SURFACE_LOST:
            return self._surface_lost(msg)
        else:
            t.on_action(msg.kind)
        return True

    def run_pending(self) -> bool:
        """Drain what is queued right now without blocking."""
        while True:
            try:
                msg = self.inbox.get_nowait()
            except queue.Empty:
                return True
            if not self.dispatch(msg):
                return False

    def run(self) -> None:
        self._running = True
        try:
            while self._running:
                msg = self.inbox.get()
                log.debug("message %s from %r", msg.kind.value, msg.source)
                if not self.dispatch(msg):
                    self._running = False
        finally:
            self.shutdown()

    def stop(self) -> None:
        self.post(Message(MessageKind.QUIT, source="stop"))

    def shutdown(self) -> None:
        if self.toggle is not None:
            self.toggle.teardown()
        self.foreground = False
        log.info("service stopped")
