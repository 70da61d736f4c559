from contest_logger.events import Listeners
from contest_logger.workmode import Workmode, WorkmodeController


def test_default_workmode():
    assert WorkmodeController().workmode == Workmode.SEARCH_POUNCE


def test_change_notifies_listeners_in_order():
    controller = WorkmodeController()
    calls = []
    controller.on_workmode_changed(lambda mode: calls.append(("first", mode)))
    controller.on_workmode_changed(lambda mode: calls.append(("second", mode)))

    controller.set_workmode(Workmode.RUN)
    controller.set_workmode(Workmode.RUN)

    assert controller.workmode == Workmode.RUN
    assert calls == [("first", Workmode.RUN), ("second", Workmode.RUN)]


def test_toggle():
    controller = WorkmodeController()
    seen = []
    controller.on_workmode_changed(seen.append)

    assert controller.toggle() == Workmode.RUN
    assert controller.toggle() == Workmode.SEARCH_POUNCE
    assert seen == [Workmode.RUN, Workmode.SEARCH_POUNCE]


def test_failing_listener_does_not_stop_delivery():
    listeners = Listeners("test event")
    seen = []

    def broken(payload):
        raise ValueError("boom")

    listeners.add(broken)
    listeners.add(seen.append)

    failures = listeners.emit(42)

    assert seen == [42]
    assert len(failures) == 1
    assert failures[0][0] is broken
    assert isinstance(failures[0][1], ValueError)

    listeners.clear()
    assert len(listeners) == 0
