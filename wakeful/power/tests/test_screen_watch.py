import queue
import threading

from wakeful.core.config import WatchConfig
from wakeful.core.types import MessageKind
from wakeful.power.screen_watch import ScreenWatcher, Subscription, read_dpms


def drm(tmp_path, **connectors):
    for name, value in connectors.items():
        d = tmp_path / name
        d.mkdir(exist_ok=True)
        (d / "dpms").write_text(value + "\n")
    return WatchConfig(dpms_glob=str(tmp_path / "*" / "dpms"), poll_interval_s=0.01)


def test_read_dpms(tmp_path):
    drm(tmp_path, **{"card0-HDMI-A-1": "Off", "card0-eDP-1": "On"})
    paths = sorted(tmp_path.glob("*/dpms"))
    assert read_dpms(paths) is True

    (tmp_path / "card0-eDP-1" / "dpms").write_text("Off\n")
    assert read_dpms(paths) is False

    assert read_dpms([tmp_path / "missing" / "dpms"]) is None


def test_fires_once_when_screen_goes_off(tmp_path):
    cfg = drm(tmp_path, **{"card0-eDP-1": "On"})
    q = queue.Queue()
    sub = ScreenWatcher(cfg).subscribe(q)

    (tmp_path / "card0-eDP-1" / "dpms").write_text("Off\n")
    msg = q.get(timeout=2)
    assert msg.kind == MessageKind.SCREEN_OFF
    assert msg.subscription_id == sub.id

    # back on and off again: the subscription is spent
    (tmp_path / "card0-eDP-1" / "dpms").write_text("On\n")
    (tmp_path / "card0-eDP-1" / "dpms").write_text("Off\n")
    sub.cancel()
    assert sub.fired
    assert q.empty()


def test_cancel_revokes_queue(tmp_path):
    cfg = drm(tmp_path, **{"card0-eDP-1": "On"})
    q = queue.Queue()
    sub = ScreenWatcher(cfg).subscribe(q)

    sub.cancel()
    assert not sub.active
    (tmp_path / "card0-eDP-1" / "dpms").write_text("Off\n")
    sub._fire()  # late poll after cancel
    assert q.empty()
    assert not sub.fired

    sub.cancel()  # idempotent


def test_no_drm_never_fires(tmp_path, caplog):
    cfg = WatchConfig(dpms_glob=str(tmp_path / "*" / "dpms"), poll_interval_s=0.01)
    q = queue.Queue()
    sub = ScreenWatcher(cfg).subscribe(q)
    assert sub._thread is None
    sub.cancel()
    assert q.empty()
    assert "no DPMS state" in caplog.text


def test_subscriptions_get_distinct_ids(tmp_path):
    cfg = drm(tmp_path, **{"card0-eDP-1": "On"})
    w = ScreenWatcher(cfg)
    a = w.subscribe(queue.Queue())
    b = w.subscribe(queue.Queue())
    try:
        assert a.id != b.id
    finally:
        a.cancel()
        b.cancel()


def test_cancel_waits_for_a_signal_in_flight():
    q = queue.Queue()
    sub = Subscription(id=99, config=WatchConfig(poll_interval_s=0.01), _queue=q)

    # hold the lock as a firing watcher would
    sub._lock.acquire()
    canceller = threading.Thread(target=sub.cancel)
    canceller.start()
    canceller.join(timeout=0.1)
    assert canceller.is_alive()
    sub._lock.release()
    canceller.join(timeout=2)
    assert not canceller.is_alive()

    # nothing can be posted once cancel() has returned
    sub._fire()
    assert q.empty()
    assert not sub.fired


def test_fire_then_cancel_posts_exactly_once():
    q = queue.Queue()
    sub = Subscription(id=7, config=WatchConfig(poll_interval_s=0.01), _queue=q)
    sub._fire()
    sub._fire()
    sub.cancel()
    assert q.qsize() == 1
    assert q.get_nowait().subscription_id == 7
