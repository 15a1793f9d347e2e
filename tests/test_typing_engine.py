import pytest

from app.calculation import CharClass
from app.errors import InvalidTargetError
from app.state import ModeSettings, SessionMode, SessionStatus
from services.results import ResultEmitter
from services.typing_engine import TypingEngine


@pytest.fixture
def make_engine(clock, wall_clock):
    def _make(text="hello world", settings=None, emitter=None):
        return TypingEngine(text, settings, clock=clock, wall_clock=wall_clock, emitter=emitter)
    return _make


def type_text(engine, text):
    for ch in text:
        engine.process_key(ch)


def test_empty_target_is_rejected(make_engine):
    with pytest.raises(InvalidTargetError):
        make_engine("")


def test_first_keystroke_starts_session(make_engine, clock):
    eng = make_engine()
    assert eng.status is SessionStatus.IDLE
    assert eng.submit("")
    assert eng.status is SessionStatus.IDLE
    assert eng.process_key("h")
    assert eng.status is SessionStatus.ACTIVE
    clock.advance(2.0)
    assert eng.elapsed_seconds() == 2.0


def test_exact_match_completes_short_text_as_skipped(make_engine, clock):
    seen = []
    eng = make_engine("cat", emitter=ResultEmitter([seen.append]))
    eng.process_key("c")
    clock.advance(1.0)
    eng.process_key("a")
    eng.process_key("t")
    assert eng.is_complete
    r = eng.result
    assert seen == [r]
    assert r.accuracy == 100
    assert r.was_skipped
    assert not r.aborted
    assert r.time_elapsed == 1.0
    assert r.wpm == 36


def test_over_length_input_is_rejected(make_engine):
    eng = make_engine("abc")
    assert eng.submit("ab")
    assert not eng.submit("abcd")
    assert eng.typed == "ab"
    assert eng.status is SessionStatus.ACTIVE


def test_input_while_paused_is_rejected(make_engine, clock):
    eng = make_engine()
    eng.process_key("h")
    assert eng.pause()
    assert not eng.process_key("e")
    assert not eng.backspace()
    assert eng.typed == "h"
    clock.advance(30.0)
    assert eng.resume()
    assert eng.process_key("e")
    assert eng.elapsed_seconds() == 0.0


def test_incorrect_input_is_kept_and_counted(make_engine):
    eng = make_engine("hello")
    type_text(eng, "hx")
    m = eng.metrics()
    assert (m.correct_chars, m.incorrect_chars) == (1, 1)
    assert m.accuracy == 50
    assert eng.classification()[:3] == [CharClass.CORRECT, CharClass.INCORRECT, CharClass.CURRENT]
    assert eng.backspace()
    assert eng.metrics().incorrect_chars == 0


def test_typing_the_target_with_errors_does_not_finish(make_engine):
    eng = make_engine("abc")
    type_text(eng, "abx")
    assert not eng.is_complete
    eng.backspace()
    eng.process_key("c")
    assert eng.is_complete


def test_finalize_is_idempotent(make_engine, clock):
    calls = []
    eng = make_engine(emitter=ResultEmitter([calls.append]))
    type_text(eng, "hello")
    clock.advance(3.0)
    first = eng.finalize()
    second = eng.finalize(aborted=False)
    assert first is second
    assert first.aborted
    assert len(calls) == 1
    assert not eng.process_key(" ")


def test_finalize_while_paused_keeps_frozen_time(make_engine, clock):
    eng = make_engine()
    type_text(eng, "hello")
    clock.advance(4.0)
    eng.pause()
    clock.advance(100.0)
    r = eng.finalize()
    assert r.time_elapsed == 4.0
    assert eng.status is SessionStatus.COMPLETE


def test_finalize_from_idle_produces_empty_skipped_result(make_engine):
    r = make_engine().finalize()
    assert r.total_characters == 0
    assert r.accuracy == 100
    assert r.was_skipped


def test_time_limit_ends_session_on_tick(make_engine, clock):
    settings = ModeSettings(mode=SessionMode.TIMED, time_limit=15.0)
    eng = make_engine("x" * 600, settings=settings)
    type_text(eng, "x" * 20)
    clock.advance(5.0)
    eng.tick()
    assert eng.remaining_seconds() == 10.0
    clock.advance(10.0)
    eng.tick()
    assert eng.is_complete
    r = eng.result
    assert not r.aborted
    assert r.mode == "timed"
    assert not r.was_skipped
    assert r.time_elapsed == 15.0
    assert [t for t, _ in r.samples] == [5.0, 15.0]


def test_tick_is_a_no_op_unless_active(make_engine, clock):
    eng = make_engine()
    eng.tick()
    assert eng.samples() == []
    eng.process_key("h")
    eng.pause()
    clock.advance(1.0)
    eng.tick()
    assert eng.samples() == []


def test_remaining_is_none_without_limit(make_engine):
    assert make_engine().remaining_seconds() is None


def test_reset_loads_new_text(make_engine):
    eng = make_engine()
    type_text(eng, "hel")
    eng.finalize()
    eng.reset("new text", ModeSettings(mode=SessionMode.CUSTOM, text_title="Mine"))
    assert eng.status is SessionStatus.IDLE
    assert eng.typed == ""
    assert eng.result is None
    assert eng.target == "new text"
    assert eng.settings.mode is SessionMode.CUSTOM
    assert eng.metrics().typed_chars == 0


def test_failing_listener_does_not_break_session(make_engine):
    def boom(_):
        raise RuntimeError("listener failure")
    seen = []
    eng = make_engine("hi", emitter=ResultEmitter([boom, seen.append]))
    type_text(eng, "hi")
    assert eng.is_complete
    assert seen == [eng.result]


def test_result_timestamps_come_from_wall_clock(make_engine, clock, wall_clock):
    eng = make_engine("hello")
    eng.process_key("h")
    wall_clock.advance(7.0)
    type_text(eng, "ello")
    r = eng.result
    assert r.started_at == 1_700_000_000.0
    assert r.ended_at == 1_700_000_007.0


def test_input_after_time_limit_ends_session(make_engine, clock):
    settings = ModeSettings(mode=SessionMode.TIMED, time_limit=15.0)
    eng = make_engine("x" * 600, settings=settings)
    eng.process_key("x")
    clock.advance(15.09)
    assert not eng.process_key("x")
    assert eng.is_complete
    r = eng.result
    assert not r.aborted
    assert r.total_characters == 1
    assert r.time_elapsed == 15.0
    eng.tick()
    assert eng.result is r


def test_late_tick_is_clamped_to_time_limit(make_engine, clock):
    settings = ModeSettings(mode=SessionMode.TIMED, time_limit=15.0)
    eng = make_engine("x" * 600, settings=settings)
    eng.process_key("x")
    clock.advance(15.4)
    eng.tick()
    assert eng.result.time_elapsed == 15.0
    assert eng.samples()[-1][0] == 15.0
    assert eng.remaining_seconds() == 0.0
