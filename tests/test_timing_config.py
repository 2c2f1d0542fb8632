import pytest

from morse_engine.timing_config import TimingConfig, SignalStep
from morse_engine.timing_units import TimingUnit, QueueEntry


def test_default_dot_is_100ms():
    timing = TimingConfig()
    assert timing.dot_seconds == pytest.approx(0.1)


def test_holds_are_exact_multiples_of_a_dot():
    timing = TimingConfig.from_milliseconds(40)
    dot = timing.dot_seconds
    assert timing.dash_seconds == pytest.approx(3 * dot)
    assert timing.symbol_gap_seconds == pytest.approx(dot)
    assert timing.char_gap_seconds == pytest.approx(3 * dot)
    assert timing.word_gap_seconds == pytest.approx(5 * dot)


def test_patterns_for_each_unit():
    timing = TimingConfig(dot_seconds=0.1)
    assert timing.pattern_for(TimingUnit.DOT) == (SignalStep(True, 0.1), SignalStep(False, 0.1))
    assert timing.pattern_for(TimingUnit.DASH) == (SignalStep(True, pytest.approx(0.3)), SignalStep(False, 0.1))
    assert timing.pattern_for(TimingUnit.CHAR_BOUNDARY_PAUSE) == (SignalStep(None, pytest.approx(0.3)),)
    assert timing.pattern_for(TimingUnit.WORD_BOUNDARY_PAUSE) == (SignalStep(None, pytest.approx(0.5)),)
    assert timing.pattern_for(TimingUnit.EMPTY) == ()


def test_unit_durations():
    timing = TimingConfig(dot_seconds=0.1)
    assert timing.unit_duration(TimingUnit.DOT) == pytest.approx(0.2)
    assert timing.unit_duration(TimingUnit.DASH) == pytest.approx(0.4)
    assert timing.unit_duration(TimingUnit.CHAR_BOUNDARY_PAUSE) == pytest.approx(0.3)
    assert timing.unit_duration(TimingUnit.WORD_BOUNDARY_PAUSE) == pytest.approx(0.5)
    assert timing.unit_duration(TimingUnit.EMPTY) == 0


def test_from_wpm_uses_paris_standard():
    timing = TimingConfig.from_wpm(12)
    assert timing.dot_seconds == pytest.approx(0.1)
    assert timing.wpm == pytest.approx(12)


@pytest.mark.parametrize("dot", [0, -0.1, "fast", True, float("nan"), float("inf"), 1e300])
def test_invalid_dot_duration_rejected(dot):
    with pytest.raises(ValueError):
        TimingConfig(dot_seconds=dot)


@pytest.mark.parametrize("wpm", [0, -5, float("nan"), float("inf")])
def test_invalid_wpm_rejected(wpm):
    with pytest.raises(ValueError):
        TimingConfig.from_wpm(wpm)


def test_timing_config_is_immutable():
    timing = TimingConfig()
    with pytest.raises(AttributeError):
        timing.dot_seconds = 0.5


def test_normalize_maps_none_and_junk_to_empty(caplog):
    assert TimingUnit.normalize(TimingUnit.DASH) is TimingUnit.DASH
    assert TimingUnit.normalize(None) is TimingUnit.EMPTY
    with caplog.at_level("WARNING"):
        assert TimingUnit.normalize("dash") is TimingUnit.EMPTY
    assert "Ignoring non-unit value" in caplog.text


def test_keyed_units():
    assert TimingUnit.DOT.is_keyed
    assert TimingUnit.DASH.is_keyed
    assert not TimingUnit.CHAR_BOUNDARY_PAUSE.is_keyed
    assert not TimingUnit.WORD_BOUNDARY_PAUSE.is_keyed
    assert not TimingUnit.EMPTY.is_keyed


def test_queue_entry_validation():
    entry = QueueEntry(TimingUnit.DOT)
    assert entry.listener is None
    with pytest.raises(ValueError):
        QueueEntry(None)
    with pytest.raises(ValueError):
        QueueEntry(TimingUnit.DOT, listener="not callable")
