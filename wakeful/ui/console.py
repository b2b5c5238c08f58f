from __future__ import annotations

from wakeful.core.types import Affordance, Notice, ToggleState


class ConsoleSurface:
    """
    Renderer + notifier for sessions without a tray (hotkeys only).
    Prints state changes the way the daemon prints its banner.
    """

    def ready(self) -> bool:
        return True

    def render(self, affordance: Affordance) -> None:
        print(f"[Wakeful] {'ON' if affordance.state == ToggleState.ACTIVE else 'OFF'}")

    def show(self, notice: Notice) -> None:
        print(f"[Wakeful] {notice.title}: {notice.body}")

    def remove(self) -> None:
        pass
