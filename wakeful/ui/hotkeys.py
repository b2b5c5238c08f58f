from __future__ import annotations

import logging
from typing import Callable

from pynput import keyboard

from wakeful.core.types import Message, MessageKind

log = logging.getLogger(__name__)


def run_hotkeys(post: Callable[[Message], None], combo: str = "<ctrl>+<alt>+w") -> None:
    """
    Global hotkey (X11):
    - Ctrl+Alt+W: Toggle keep-awake
    """

    def on_toggle():
        log.info("toggle requested (%s)", combo)
        post(Message(MessageKind.TOGGLE, source="hotkey"))

    with keyboard.GlobalHotKeys({combo: on_toggle}) as listener:
        listener.join()
