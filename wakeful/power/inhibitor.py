from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from typing import List

from wakeful.core.config import InhibitConfig
from wakeful.core.errors import WakeLockUnavailable, WakeLockUnderLocked

log = logging.getLogger(__name__)

RELEASE_WAIT_S = 1.0


@dataclass
class WakeLock:
    """
    Idle/sleep inhibitor lock held through a systemd-inhibit child.

    Reference counted: every acquire() spawns one more child and every
    release() ends the newest one. held stays True until all are gone.
    """
    config: InhibitConfig = InhibitConfig()
    _procs: List[subprocess.Popen] = field(default_factory=list)

    @property
    def held(self) -> bool:
        return bool(self._procs)

    @property
    def count(self) -> int:
        return len(self._procs)

    def command(self) -> List[str]:
        c = self.config
        return [
            c.binary,
            f"--what={c.what}",
            f"--who={c.who}",
            f"--why={c.why}",
            f"--mode={c.mode}",
            "sleep", "infinity",
        ]

    def acquire(self) -> None:
        cmd = self.command()
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except FileNotFoundError as e:
            raise WakeLockUnavailable(f"{cmd[0]} not found") from e
        except OSError as e:
            raise WakeLockUnavailable(f"could not start {cmd[0]}: {e}") from e

        # systemd-inhibit exits straight away when logind refuses the lock
        if proc.poll() is not None:
            raise WakeLockUnavailable(f"{cmd[0]} exited with status {proc.returncode}")

        self._procs.append(proc)
        log.debug("inhibitor pid=%s acquired (count=%d)", proc.pid, self.count)

    def release(self) -> None:
        if not self._procs:
            raise WakeLockUnderLocked("wake lock released while not held")
        proc = self._procs.pop()
        try:
            proc.terminate()
            proc.wait(timeout=RELEASE_WAIT_S)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
        log.debug("inhibitor pid=%s released (count=%d)", proc.pid, self.count)

    def release_all(self) -> None:
        while self._procs:
            self.release()
