from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from wakeful.core.types import ToggleState

if TYPE_CHECKING:
    from wakeful.power.screen_watch import Subscription


@dataclass
class ControlState:
    """
    Shared control plane, owned by one service.
    Only touched from the service thread, so no lock.
    subscription is not None exactly while state is ACTIVE.
    """
    state: ToggleState = ToggleState.INACTIVE
    subscription: Optional["Subscription"] = None

    def is_active(self) -> bool:
        return self.state == ToggleState.ACTIVE

    def set_state(self, value: ToggleState) -> None:
        self.state = value
