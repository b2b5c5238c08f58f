"""
Wakeful — core contracts.

Everything that crosses a thread or a collaborator boundary is defined here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ToggleState(str, Enum):
    INACTIVE = "INACTIVE"
    ACTIVE = "ACTIVE"


class Icon(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class Affordance:
    """What the renderer is asked to draw after a transition."""
    state: ToggleState
    icon: Icon

    @classmethod
    def for_state(cls, state: ToggleState) -> "Affordance":
        icon = Icon.ACTIVE if state == ToggleState.ACTIVE else Icon.INACTIVE
        return cls(state=state, icon=icon)


@dataclass(frozen=True)
class Notice:
    """Persistent notification shown while the wake lock is held."""
    title: str
    body: str
    action_label: str


# ============================================================
# Control queue (tray / hotkeys / watcher → service thread)
# ============================================================

class MessageKind(str, Enum):
    TOGGLE = "TOGGLE"                    # user clicked the control
    ALLOW_SLEEP = "ALLOW_SLEEP"          # notification "release" action
    SCREEN_OFF = "SCREEN_OFF"            # subscribed power event fired
    START_LISTENING = "START_LISTENING"  # UI (re)attached, re-render
    SURFACE_LOST = "SURFACE_LOST"        # tray backend died
    QUIT = "QUIT"


@dataclass(frozen=True)
class Message:
    kind: MessageKind
    source: str = ""
    subscription_id: Optional[int] = None
