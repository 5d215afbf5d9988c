from conftest import DummyPlayer

from dripwatch.core.alerts import AlertDriver
from dripwatch.core.classifier import classify
from dripwatch.core.models import BLOCKED, STOPPED, UNKNOWN, normal


def test_repeated_alert_starts_cue_once(player):
    driver = AlertDriver(player)
    assert driver.open() is True

    first = driver.feed(classify("Drip stopped"))
    second = driver.feed(classify("Drip stopped"))

    assert first is not None
    assert (first.previous, first.current) == ("IDLE", "ALERTING")
    assert second is None
    assert player.started == 1
    assert player.stopped == 0


def test_recovery_stops_cue_once(player):
    driver = AlertDriver(player)
    driver.open()

    driver.feed(STOPPED)
    back = driver.feed(normal(20))
    again = driver.feed(normal(21))

    assert back is not None
    assert (back.previous, back.current) == ("ALERTING", "IDLE")
    assert again is None
    assert player.started == 1
    assert player.stopped == 1
    assert driver.alerting is False


def test_stopped_to_blocked_keeps_playing(player):
    driver = AlertDriver(player)
    driver.open()

    driver.feed(STOPPED)
    assert driver.feed(BLOCKED) is None
    assert player.started == 1
    assert player.stopped == 0


def test_unknown_clears_alert(player):
    driver = AlertDriver(player)
    driver.open()
    driver.feed(BLOCKED)
    t = driver.feed(UNKNOWN)
    assert t is not None and t.current == "IDLE"
    assert player.stopped == 1


def test_idle_normal_has_no_side_effect(player):
    driver = AlertDriver(player)
    driver.open()
    assert driver.feed(normal()) is None
    assert driver.feed(normal(5)) is None
    assert player.started == 0
    assert player.stopped == 0


def test_acquire_failure_runs_silent():
    player = DummyPlayer(acquire_ok=False)
    driver = AlertDriver(player)
    assert driver.open() is False
    assert driver.silent is True

    t = driver.feed(STOPPED)
    assert t is not None and t.current == "ALERTING"
    assert player.started == 0

    driver.close()
    assert player.released == 0


def test_acquire_exception_is_not_fatal():
    class ExplodingPlayer(DummyPlayer):
        def acquire(self) -> bool:
            raise RuntimeError("no audio device")

    driver = AlertDriver(ExplodingPlayer())
    assert driver.open() is False
    assert driver.feed(STOPPED) is not None


def test_acquire_and_release_exactly_once(player):
    driver = AlertDriver(player)
    driver.open()
    driver.open()
    driver.feed(STOPPED)

    driver.close()
    driver.close()

    assert player.acquired == 1
    assert player.released == 1
    # cue was stopped before release
    assert player.stopped == 1

    # no reacquire after teardown
    assert driver.open() is False
    assert player.acquired == 1


def test_driver_without_player_tracks_state():
    driver = AlertDriver()
    assert driver.open() is False
    driver.feed(STOPPED)
    assert driver.alerting is True


def test_close_while_alerting_returns_to_idle(player):
    driver = AlertDriver(player)
    driver.open()
    driver.feed(STOPPED)

    driver.close()

    assert driver.alerting is False
    assert driver.phase == "IDLE"
    assert player.stopped == 1
    assert player.released == 1


def test_close_in_silent_mode_returns_to_idle():
    driver = AlertDriver(DummyPlayer(acquire_ok=False))
    driver.open()
    driver.feed(BLOCKED)
    driver.close()
    assert driver.alerting is False
