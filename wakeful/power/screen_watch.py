from __future__ import annotations

import glob
import itertools
import logging
import queue
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from wakeful.core.config import WatchConfig
from wakeful.core.types import Message, MessageKind

log = logging.getLogger(__name__)

_ids = itertools.count(1)


def read_dpms(paths: List[Path]) -> Optional[bool]:
    """
    True if any connector reports "On", False if none does.
    None when nothing could be read (no DRM, no permission).
    """
    seen = False
    for p in paths:
        try:
            value = p.read_text().strip()
        except OSError:
            continue
        seen = True
        if value == "On":
            return True
    return False if seen else None


@dataclass
class Subscription:
    """
    One live registration with the screen-off source.

    Holds a plain reference to the owner's queue until cancel() drops it.
    Fires at most once: after posting SCREEN_OFF it stops by itself.
    """
    id: int
    config: WatchConfig
    _queue: Optional["queue.Queue[Message]"]
    _stop: threading.Event = field(default_factory=threading.Event)
    _lock: threading.Lock = field(default_factory=threading.Lock)
    _thread: Optional[threading.Thread] = None
    fired: bool = False

    @property
    def active(self) -> bool:
        return self._queue is not None and not self._stop.is_set()

    def start(self) -> None:
        paths = self._paths()
        if not paths:
            log.warning("no DPMS state under %s; screen-off will not release", self.config.dpms_glob)
            return
        # baseline is read before returning so an immediate "Off" is seen as a change
        last = read_dpms(paths)
        self._thread = threading.Thread(
            target=self._run, args=(paths, last), name=f"screen-watch-{self.id}", daemon=True
        )
        self._thread.start()

    def cancel(self) -> None:
        # once this returns no SCREEN_OFF from this subscription can reach the queue
        with self._lock:
            self._stop.set()
            self._queue = None
        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout=self.config.poll_interval_s * 2)

    def _paths(self) -> List[Path]:
        return [Path(p) for p in sorted(glob.glob(self.config.dpms_glob))]

    def _run(self, paths: List[Path], last: Optional[bool]) -> None:
        while not self._stop.wait(self.config.poll_interval_s):
            cur = read_dpms(paths)
            if cur is None:
                continue
            if last and not cur:
                self._fire()
                return
            last = cur

    def _fire(self) -> None:
        with self._lock:
            q = self._queue
            if q is None or self._stop.is_set():
                return
            self.fired = True
            self._stop.set()
            log.debug("screen off (subscription %d)", self.id)
            q.put(Message(MessageKind.SCREEN_OFF, source="dpms", subscription_id=self.id))


@dataclass
class ScreenWatcher:
    """Screen-off event source backed by DRM connector DPMS state."""
    config: WatchConfig = WatchConfig()

    def subscribe(self, q: "queue.Queue[Message]") -> Subscription:
        sub = Subscription(id=next(_ids), config=self.config, _queue=q)
        sub.start()
        return sub
