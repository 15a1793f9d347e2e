import pytest

from app.calculation import compute_metrics
from app.state import ModeSettings, SessionMode
from services.results import MIN_PROGRESS_CHARS, ResultEmitter


@pytest.mark.parametrize("typed_len,skipped", [(0, True), (9, True), (10, False), (25, False)])
def test_minimum_progress_boundary(typed_len, skipped):
    metrics = compute_metrics("a" * 40, "a" * typed_len, 10.0)
    result = ResultEmitter().build(metrics, ModeSettings())
    assert result.was_skipped is skipped
    assert MIN_PROGRESS_CHARS == 10


def test_build_copies_metrics_and_settings():
    settings = ModeSettings(mode=SessionMode.DEVELOPER, language="python", snippet_title="Loop")
    metrics = compute_metrics("hello world", "hello wxrld", 6.0)
    r = ResultEmitter().build(metrics, settings, aborted=True, started_at=5.0, ended_at=11.0,
                              samples=[(1.0, 20.0)])
    assert r.mode == "developer"
    assert r.settings is settings
    assert r.errors == 1
    assert r.correct_chars == 10
    assert r.total_characters == 11
    assert r.target_characters == 11
    assert r.aborted
    assert r.samples == ((1.0, 20.0),)


def test_skipped_results_are_still_delivered():
    seen = []
    emitter = ResultEmitter()
    emitter.add_listener(seen.append)
    r = emitter.emit(compute_metrics("abc", "a", 1.0), ModeSettings())
    assert r.was_skipped
    assert seen == [r]


def test_removed_listener_is_not_called():
    seen = []
    emitter = ResultEmitter([seen.append])
    emitter.remove_listener(seen.append)
    emitter.remove_listener(seen.append)
    emitter.emit(compute_metrics("abc", "abc", 1.0), ModeSettings())
    assert seen == []
