from __future__ import annotations

import logging
import queue
from typing import Optional, Protocol

from wakeful.core.config import NoticeConfig
from wakeful.core.control import ControlState
from wakeful.core.errors import WakefulError
from wakeful.core.types import Affordance, Message, MessageKind, Notice, ToggleState

log = logging.getLogger(__name__)


class Renderer(Protocol):
    def ready(self) -> bool: ...
    def render(self, affordance: Affordance) -> None: ...


class Notifier(Protocol):
    def show(self, notice: Notice) -> None: ...
    def remove(self) -> None: ...


class Host(Protocol):
    def keep_running(self) -> None: ...
    def may_stop(self) -> None: ...


class Lock(Protocol):
    @property
    def held(self) -> bool: ...
    def acquire(self) -> None: ...
    def release(self) -> None: ...
    def release_all(self) -> None: ...


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class EventSource(Protocol):
    def subscribe(self, q: "queue.Queue[Message]") -> Cancellable: ...


class WakeLockToggle:
    """
    The on/off control.

    Every method runs on the service thread; collaborators are injected and
    the only state is the ControlState handed in by the owner.
    """

    def __init__(
        self,
        control: ControlState,
        lock: Lock,
        renderer: Renderer,
        notifier: Notifier,
        host: Host,
        events: EventSource,
        inbox: "queue.Queue[Message]",
        notice: NoticeConfig = NoticeConfig(),
    ) -> None:
        self.control = control
        self.lock = lock
        self.renderer = renderer
        self.notifier = notifier
        self.host = host
        self.events = events
        self.inbox = inbox
        self.notice = Notice(notice.title, notice.body, notice.action_label)

    @property
    def state(self) -> ToggleState:
        return self.control.state

    def activate(self) -> None:
        if not self.renderer.ready():
            log.error("activate: no control to update, ignoring")
            return
        if self.lock.held:
            # no guard at the lock layer: this is a second acquisition
            log.warning("activate while wake lock already held; acquiring again")
        try:
            self.lock.acquire()
        except WakefulError as e:
            log.error("wake lock unavailable: %s", e)
            return

        self.control.set_state(ToggleState.ACTIVE)
        self.renderer.render(Affordance.for_state(ToggleState.ACTIVE))
        self.host.keep_running()
        self.notifier.show(self.notice)
        self._unsubscribe()
        self.control.subscription = self.events.subscribe(self.inbox)
        log.info("wake lock acquired, state = %s", self.state.value)

    def deactivate(self) -> None:
        try:
            self.lock.release()
        except WakefulError as e:
            log.warning("%s", e)

        self.control.set_state(ToggleState.INACTIVE)
        if self.renderer.ready():
            self.renderer.render(Affordance.for_state(ToggleState.INACTIVE))
        log.info("wake lock released, state = %s", self.state.value)
        self._unsubscribe()
        self.notifier.remove()
        self.host.may_stop()

    def on_user_toggle(self) -> None:
        if self.lock.held:
            self.deactivate()
        else:
            self.activate()

    def on_external_event(self, subscription_id: Optional[int] = None) -> None:
        log.debug("external event (subscription %s), state = %s", subscription_id, self.state.value)
        self.deactivate()

    def on_start_listening(self) -> None:
        if self.renderer.ready():
            self.renderer.render(Affordance.for_state(self.state))

    def on_action(self, kind: MessageKind) -> None:
        if kind == MessageKind.ALLOW_SLEEP:
            self.deactivate()
        else:
            log.debug("on_action: not processing action %s", kind.value)

    def use_surface(self, renderer: Renderer, notifier: Notifier) -> None:
        """Swap the UI collaborators, e.g. after the tray backend died."""
        self.renderer = renderer
        self.notifier = notifier
        if self.control.is_active():
            self.notifier.show(self.notice)

    def teardown(self) -> None:
        """Owner is going away: revoke the subscription, drop every acquisition."""
        self._unsubscribe()
        try:
            self.lock.release_all()
        except WakefulError as e:
            log.warning("teardown: %s", e)
        if self.control.is_active():
            self.control.set_state(ToggleState.INACTIVE)
            self.notifier.remove()

    def _unsubscribe(self) -> None:
        sub = self.control.subscription
        self.control.subscription = None
        if sub is not None:
            sub.cancel()
