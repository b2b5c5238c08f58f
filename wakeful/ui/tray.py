from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

import pystray
from PIL import Image, ImageDraw

from wakeful.core.types import Affordance, Icon, Message, MessageKind, Notice, ToggleState

log = logging.getLogger(__name__)

Post = Callable[[Message], None]


def make_icon(icon: Icon) -> Image.Image:
    # Minimal monochrome ring + dot (small, subtle)
    img = Image.new("RGBA", (64, 64), (0, 0, 0, 0))
    d = ImageDraw.Draw(img)

    # outer ring
    d.ellipse((12, 12, 52, 52), outline=(255, 255, 255, 220), width=4)

    # inner dot: solid while the lock is held
    dot = (255, 255, 255, 255) if icon == Icon.ACTIVE else (255, 255, 255, 70)
    d.ellipse((24, 24, 40, 40), fill=dot)
    return img


def title_for(state: ToggleState) -> str:
    return f"Wakeful ({'ON' if state == ToggleState.ACTIVE else 'OFF'})"


class Tray:
    """
    Tray icon: renders the affordance and presents the notification.
    Menu clicks never touch the toggle directly, they post messages.
    """

    def __init__(self, post: Post, action_label: str = "Allow sleep") -> None:
        self.post = post
        self.action_label = action_label
        self._state = ToggleState.INACTIVE
        self._ready = threading.Event()
        self.icon = pystray.Icon(
            "Wakeful",
            icon=make_icon(Icon.INACTIVE),
            title=title_for(ToggleState.INACTIVE),
            menu=self._menu(),
        )

    def _menu(self) -> pystray.Menu:
        active = lambda _item: self._state == ToggleState.ACTIVE  # noqa: E731
        return pystray.Menu(
            pystray.MenuItem(
                "Keep awake",
                lambda _icon, _item: self.post(Message(MessageKind.TOGGLE, source="tray")),
                checked=active,
                default=True,
            ),
            pystray.MenuItem(
                self.action_label,
                lambda _icon, _item: self.post(Message(MessageKind.ALLOW_SLEEP, source="tray")),
                enabled=active,
            ),
            pystray.Menu.SEPARATOR,
            pystray.MenuItem(
                "Quit",
                lambda _icon, _item: self.post(Message(MessageKind.QUIT, source="tray")),
            ),
        )

    # --- Renderer ---

    def ready(self) -> bool:
        return self._ready.is_set()

    def render(self, affordance: Affordance) -> None:
        self._state = affordance.state
        self.icon.icon = make_icon(affordance.icon)
        self.icon.title = title_for(affordance.state)
        self.icon.update_menu()

    # --- Notifier ---

    def show(self, notice: Notice) -> None:
        try:
            self.icon.notify(f"{notice.body}\n({notice.action_label} from the tray menu)", notice.title)
        except Exception as e:
            # Notification support varies per backend; the tray keeps working without it.
            log.warning("notification not shown: %s", e)

    def remove(self) -> None:
        try:
            self.icon.remove_notification()
        except Exception as e:
            log.warning("notification not removed: %s", e)

    # --- lifecycle ---

    def _setup(self, icon: pystray.Icon) -> None:
        icon.visible = True
        self._ready.set()
        self.post(Message(MessageKind.START_LISTENING, source="tray"))

    def run(self, stop_flag: Optional[threading.Event] = None) -> None:
        try:
            self.icon.run(setup=self._setup)
        except Exception as e:
            # Tray backends can be fragile; do not kill the app.
            log.error("tray backend crashed: %s", e)
            self._ready.clear()
            self.post(Message(MessageKind.SURFACE_LOST, source="tray"))
        finally:
            self._ready.clear()
            if stop_flag is not None:
                stop_flag.set()

    def stop(self) -> None:
        self.icon.stop()


def run_tray(tray: Tray, stop_flag: threading.Event) -> None:
    tray.run(stop_flag)
