import pytest

from latency_manager import RateController, RateState, decide

TARGET = 4.0


@pytest.mark.parametrize(
    "latency, applied, expected",
    [
        (4.5, RateState.NORMAL, RateState.SPEED_UP),
        (4.5, RateState.SPEED_UP, None),
        (3.95, RateState.SPEED_UP, RateState.NORMAL),
        (4.05, RateState.NORMAL, None),
        (3.0, RateState.NORMAL, RateState.SPEED_DOWN),
        (3.0, RateState.SPEED_DOWN, None),
        (4.05, RateState.SPEED_DOWN, RateState.NORMAL),
        (4.5, RateState.SPEED_DOWN, RateState.SPEED_UP),
        (3.0, RateState.SPEED_UP, RateState.SPEED_DOWN),
    ],
)
def test_decide(latency, applied, expected):
    assert decide(latency, TARGET, applied, window=0.1) is expected


def test_window_edges_count_as_inside():
    assert decide(4.1, TARGET, RateState.NORMAL, window=0.1) is None
    assert decide(3.9, TARGET, RateState.NORMAL, window=0.1) is None
    assert decide(4.1001, TARGET, RateState.NORMAL, window=0.1) is RateState.SPEED_UP


def test_controller_rates():
    controller = RateController(window=0.1, catchup_rate=0.08)

    assert controller.rate == 1.0
    assert controller.update(4.5, TARGET) == pytest.approx(1.08)
    assert controller.update(4.6, TARGET) is None
    assert controller.update(3.95, TARGET) == 1.0
    assert controller.update(4.0, TARGET) is None
    assert controller.update(3.0, TARGET) == pytest.approx(0.92)
    assert controller.state is RateState.SPEED_DOWN


def test_controller_reset():
    controller = RateController()
    controller.update(10.0, TARGET)
    assert controller.state is RateState.SPEED_UP

    controller.reset()

    assert controller.state is RateState.NORMAL
    assert controller.rate == 1.0


def test_custom_catchup_rate():
    controller = RateController(window=0.5, catchup_rate=0.25)

    assert controller.update(4.4, TARGET) is None
    assert controller.update(4.6, TARGET) == pytest.approx(1.25)
    assert controller.rate_for(RateState.SPEED_DOWN) == pytest.approx(0.75)
