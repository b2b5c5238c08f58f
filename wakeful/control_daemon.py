from __future__ import annotations

import logging
import threading

from wakeful.core.config import Config, load_config
from wakeful.core.control import ControlState
from wakeful.core.toggle import WakeLockToggle
from wakeful.power.inhibitor import WakeLock
from wakeful.power.screen_watch import ScreenWatcher
from wakeful.runtime.service import ToggleService
from wakeful.ui.console import ConsoleSurface
try:
    from wakeful.ui.tray import Tray, run_tray
except Exception:
    Tray = None
    run_tray = None
try:
    from wakeful.ui.hotkeys import run_hotkeys
except Exception:
    run_hotkeys = None

log = logging.getLogger("wakeful")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="[Wakeful] %(levelname)s %(name)s: %(message)s",
    )


def build(cfg: Config, service: ToggleService, surface) -> WakeLockToggle:
    toggle = WakeLockToggle(
        control=ControlState(),
        lock=WakeLock(cfg.inhibit),
        renderer=surface,
        notifier=surface,
        host=service,
        events=ScreenWatcher(cfg.watch),
        inbox=service.inbox,
        notice=cfg.notice,
    )
    service.attach(toggle)
    return toggle


def main():
    cfg = load_config()
    setup_logging(cfg.log_level)

    service = ToggleService(exit_on_release=cfg.exit_on_release, fallback=ConsoleSurface())
    stop = threading.Event()

    tray = None
    if Tray is not None:
        try:
            tray = Tray(service.post, action_label=cfg.notice.action_label)
        except Exception as e:
            log.error("tray failed: %s", e)
    surface = tray if tray is not None else ConsoleSurface()
    build(cfg, service, surface)

    print("[Wakeful] Control daemon started.")
    if run_hotkeys is None:
        print("  Hotkeys: unavailable (missing backend).")
    else:
        print(f"  Hotkeys: {cfg.hotkey} = Toggle keep-awake")
        t_hotkeys = threading.Thread(target=run_hotkeys, args=(service.post, cfg.hotkey), daemon=True)
        t_hotkeys.start()

    if tray is None:
        print("  Tray: unavailable (missing backend). Hotkeys only.")
    else:
        print(f"  Tray: Keep awake / {cfg.notice.action_label} / Quit")
        t_tray = threading.Thread(target=run_tray, args=(tray, stop), daemon=True)
        t_tray.start()

    try:
        service.run()
    except KeyboardInterrupt:
        # run() tore the toggle down on the way out
        print("\n[Wakeful] exiting")
    finally:
        stop.set()
        if tray is not None:
            tray.stop()


if __name__ == "__main__":
    main()
