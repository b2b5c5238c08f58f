"""
Wakeful — defaults.

All knobs live in frozen dataclasses; a handful can be overridden through
WAKEFUL_* environment variables at start-up.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Tuple

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class InhibitConfig:
    binary: str = "systemd-inhibit"
    what: str = "idle:sleep"
    who: str = "Wakeful"
    why: str = "Keep awake toggle is on"
    mode: str = "block"


@dataclass(frozen=True)
class NoticeConfig:
    title: str = "Wakeful is keeping the screen on"
    body: str = "Turning the screen off or choosing 'Allow sleep' releases it."
    action_label: str = "Allow sleep"


@dataclass(frozen=True)
class WatchConfig:
    dpms_glob: str = "/sys/class/drm/*/dpms"
    poll_interval_s: float = 0.5


@dataclass(frozen=True)
class Config:
    inhibit: InhibitConfig = InhibitConfig()
    notice: NoticeConfig = NoticeConfig()
    watch: WatchConfig = WatchConfig()
    hotkey: str = "<ctrl>+<alt>+w"
    # exit the daemon once the lock is released instead of idling in the tray
    exit_on_release: bool = False
    log_level: str = "INFO"


DEFAULT_CONFIG = Config()

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")
_LEVELS: Tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR")


def _parse_bool(name: str, raw: str) -> Optional[bool]:
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    log.warning("ignoring %s=%r (expected a boolean)", name, raw)
    return None


def _parse_interval(name: str, raw: str) -> Optional[float]:
    try:
        v = float(raw)
    except ValueError:
        log.warning("ignoring %s=%r (expected seconds)", name, raw)
        return None
    if v <= 0:
        log.warning("ignoring %s=%r (must be > 0)", name, raw)
        return None
    return v


def load_config(environ: Optional[Mapping[str, str]] = None, base: Config = DEFAULT_CONFIG) -> Config:
    env = os.environ if environ is None else environ
    cfg = base

    raw = env.get("WAKEFUL_EXIT_ON_RELEASE")
    if raw is not None:
        flag = _parse_bool("WAKEFUL_EXIT_ON_RELEASE", raw)
        if flag is not None:
            cfg = replace(cfg, exit_on_release=flag)

    raw = env.get("WAKEFUL_POLL_INTERVAL")
    if raw is not None:
        interval = _parse_interval("WAKEFUL_POLL_INTERVAL", raw)
        if interval is not None:
            cfg = replace(cfg, watch=replace(cfg.watch, poll_interval_s=interval))

    raw = env.get("WAKEFUL_DPMS_GLOB")
    if raw:
        cfg = replace(cfg, watch=replace(cfg.watch, dpms_glob=raw))

    raw = env.get("WAKEFUL_LOG_LEVEL")
    if raw is not None:
        level = raw.strip().upper()
        if level in _LEVELS:
            cfg = replace(cfg, log_level=level)
        else:
            log.warning("ignoring WAKEFUL_LOG_LEVEL=%r", raw)

    return cfg
