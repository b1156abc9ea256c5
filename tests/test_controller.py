import threading

import pytest

from examprep.engine import (
    AttemptController,
    AttemptStatus,
    Completion,
    QuestionStatus,
    SubmitReason,
)

from conftest import build_settings, build_single_bank


def _single_attempt(keys: list[int], duration: int = 60, **kwargs) -> AttemptController:
    attempt = AttemptController(
        build_single_bank(keys),
        build_settings(duration_seconds=duration),
        run_timer_thread=False,
        **kwargs,
    )
    attempt.start()
    return attempt


def test_start_initializes_state(controller: AttemptController) -> None:
    state = controller.state()
    assert state.status == AttemptStatus.IN_PROGRESS
    assert state.current_index == 0
    assert state.visited == frozenset({0})
    assert state.remaining_seconds == 5
    assert state.statuses[0] == QuestionStatus.NOT_ANSWERED
    assert not controller.start()


def test_mutations_before_start_are_ignored(mixed_bank) -> None:
    attempt = AttemptController(mixed_bank, build_settings(), run_timer_thread=False)
    assert not attempt.set_answer(0, 1)
    assert not attempt.navigate(1)
    assert attempt.submit() is None
    assert attempt.status == AttemptStatus.NOT_STARTED


def test_navigate_marks_both_ends_visited(controller: AttemptController) -> None:
    assert controller.navigate(2)
    assert controller.current_index == 2
    assert controller.state().visited == frozenset({0, 2})


def test_navigate_out_of_range_is_ignored() -> None:
    attempt = _single_attempt([0, 1, 2, 3])
    attempt.navigate(1)
    before = attempt.state()

    assert not attempt.navigate(5)
    assert not attempt.navigate(-1)
    assert attempt.state() == before
    assert attempt.current_index == 1


def test_next_and_previous(controller: AttemptController) -> None:
    assert not controller.previous()
    assert controller.next()
    assert controller.next()
    assert controller.current_index == 2
    assert controller.previous()
    assert controller.current_index == 1
    controller.navigate(3)
    assert not controller.next()


def test_scenario_single_choice_with_negative_marking() -> None:
    attempt = _single_attempt([0, 1, 2, 3])
    attempt.set_answer(0, 0)
    attempt.set_answer(1, 3)
    attempt.set_answer(3, 3)

    result = attempt.submit()

    assert result is not None
    assert result.score == pytest.approx(3.3333333)
    assert result.correct_count == 2
    assert result.wrong_count == 1
    assert result.unattempted_count == 1
    assert result.completion == Completion.INCOMPLETE
    assert result.submitted_by == SubmitReason.MANUAL


def test_submit_is_idempotent() -> None:
    results = []
    attempt = _single_attempt([0, 1], on_submit=results.append)
    attempt.set_answer(0, 0)
    attempt.set_answer(1, 1)

    first = attempt.submit()
    second = attempt.submit()

    assert first is not None
    assert second is None
    assert results == [first]
    assert attempt.result is first
    assert attempt.status == AttemptStatus.SUBMITTED
    assert first.completion == Completion.COMPLETED


def test_mutations_after_submit_are_ignored(controller: AttemptController) -> None:
    controller.set_answer(0, 1)
    controller.submit()
    snapshot = controller.state()

    assert not controller.set_answer(0, 2)
    assert not controller.toggle_multi_option(1, 0)
    assert not controller.clear_answer(0)
    assert not controller.toggle_marked(0)
    assert not controller.navigate(1)
    assert controller.state() == snapshot
    assert controller.result.answers[0] == 1


def test_timer_expiry_submits_once(controller: AttemptController) -> None:
    results = []
    controller.add_submit_listener(results.append)
    controller.set_answer(0, 1)

    for _ in range(10):
        controller.tick()

    assert len(results) == 1
    assert results[0].submitted_by == SubmitReason.TIMEOUT
    assert results[0].time_taken_seconds == 5
    assert controller.remaining_seconds == 0
    assert controller.submit() is None


def test_manual_submit_stops_timer(controller: AttemptController) -> None:
    controller.tick()
    controller.tick()
    result = controller.submit()

    assert controller.tick() == 3
    assert controller.remaining_seconds == 3
    assert result.time_taken_seconds == 2


def test_listener_failure_does_not_undo_submit() -> None:
    def broken(_result) -> None:
        raise RuntimeError("database down")

    attempt = _single_attempt([0], on_submit=broken)
    result = attempt.submit()

    assert result is not None
    assert attempt.status == AttemptStatus.SUBMITTED


def test_failed_scoring_leaves_attempt_open(monkeypatch: pytest.MonkeyPatch) -> None:
    attempt = _single_attempt([0])

    def broken(_reason):
        raise RuntimeError("scoring failed")

    monkeypatch.setattr(attempt, "_build_result", broken)
    with pytest.raises(RuntimeError):
        attempt.submit()

    assert attempt.status == AttemptStatus.IN_PROGRESS
    assert attempt.result is None
    assert attempt.set_answer(0, 0)

    monkeypatch.undo()
    result = attempt.submit()
    assert result is not None
    assert result.correct_count == 1


def test_result_snapshot_is_frozen(controller: AttemptController) -> None:
    controller.toggle_multi_option(1, 0)
    controller.toggle_multi_option(1, 2)
    controller.set_answer(3, " ganga ")
    result = controller.submit()

    assert result.answers[1] == frozenset({0, 2})
    assert result.questions == controller.bank.questions
    assert result.correct_count == 2
    assert result.unattempted_count == 2


def test_zero_duration_exam_submits_on_start(mixed_bank) -> None:
    results = []
    attempt = AttemptController(
        mixed_bank,
        build_settings(duration_seconds=0),
        on_submit=results.append,
        run_timer_thread=False,
    )
    attempt.start()

    assert attempt.status == AttemptStatus.SUBMITTED
    assert results[0].submitted_by == SubmitReason.TIMEOUT


def test_timer_thread_races_manual_submit() -> None:
    results = []
    done = threading.Event()

    def on_submit(result) -> None:
        results.append(result)
        done.set()

    attempt = AttemptController(
        build_single_bank([0, 1]),
        build_settings(duration_seconds=2),
        on_submit=on_submit,
        tick_interval=0.005,
    )
    attempt.start()
    attempt.submit()

    assert done.wait(timeout=5)
    # give the timer thread a chance to fire if it were still running
    threading.Event().wait(0.05)
    assert len(results) == 1
