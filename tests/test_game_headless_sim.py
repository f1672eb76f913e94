from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pytest

from urinal_game.game import GameConfig, GameController, Phase
from urinal_game.results import game_summary_from_controller
from urinal_game.scenarios import Scenario, default_catalog


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t

    def advance(self, dt: float) -> None:
        self.t += float(dt)


@dataclass
class NullRenderer:
    results: list[tuple[int, str]] = field(default_factory=list)

    def render_layout(self, scenario_id, problem_text, layout, on_fixture_selected) -> None: ...
    def highlight_selection(self, index) -> None: ...
    def reveal_correct_answers(self, indices) -> None: ...
    def disable_all_input(self) -> None: ...
    def show_screen(self, name) -> None: ...
    def update_score(self, score) -> None: ...
    def show_feedback(self, is_correct, feedback) -> None: ...

    def show_results(self, score, rating) -> None:
        self.results.append((score, rating.title))


def _right(s: Scenario) -> int:
    return min(s.correct_answers)


def _wrong(s: Scenario) -> int:
    return next(i for i in s.selectable_indices() if i not in s.correct_answers)


def _play(controller: GameController, clock: FakeClock, picks: list[bool]) -> None:
    catalog = default_catalog()
    controller.start()
    for i, correct in enumerate(picks):
        scenario = catalog.scenario_at(i)
        assert controller.current_scenario() == scenario
        assert controller.submit_selection(_right(scenario) if correct else _wrong(scenario)) is True
        clock.advance(0.5)
        controller.update()
        assert controller.phase is Phase.FEEDBACK
        assert controller.advance() is True


def test_headless_sim_all_correct_is_urinal_master() -> None:
    clock = FakeClock()
    renderer = NullRenderer()
    controller = GameController(renderer=renderer, clock=clock)

    _play(controller, clock, [True] * 6)

    assert controller.phase is Phase.RESULTS
    assert controller.score == 6
    assert renderer.results == [(6, "URINAL MASTER")]


def test_headless_sim_all_wrong_is_social_menace() -> None:
    clock = FakeClock()
    renderer = NullRenderer()
    controller = GameController(renderer=renderer, clock=clock)

    _play(controller, clock, [False] * 6)

    assert controller.phase is Phase.RESULTS
    assert controller.score == 0
    assert renderer.results == [(0, "SOCIAL MENACE")]
    assert all(not a.was_correct for a in controller.answers())


def test_headless_sim_mixed_answers_keep_history_in_scenario_order() -> None:
    clock = FakeClock()
    renderer = NullRenderer()
    controller = GameController(renderer=renderer, clock=clock)
    picks = [True, False, True, False, True, False]

    _play(controller, clock, picks)

    answers = controller.answers()
    assert [a.scenario_id for a in answers] == [1, 2, 3, 4, 5, 6]
    assert [a.was_correct for a in answers] == picks
    assert renderer.results == [(3, "NEEDS PRACTICE")]


def test_history_grows_by_one_per_completed_scenario() -> None:
    clock = FakeClock()
    controller = GameController(renderer=NullRenderer(), clock=clock)
    catalog = default_catalog()
    controller.start()

    for n in range(1, 4):
        controller.submit_selection(_right(catalog.scenario_at(n - 1)))
        clock.advance(0.5)
        controller.update()
        assert len(controller.answers()) == n
        assert controller.answers()[-1].scenario_id == n
        controller.advance()


def test_headless_sim_auto_advance_plays_through_without_manual_advance() -> None:
    clock = FakeClock()
    renderer = NullRenderer()
    controller = GameController(renderer=renderer, clock=clock, config=GameConfig(auto_advance_delay_s=2.0))
    catalog = default_catalog()
    controller.start()

    for i in range(catalog.scenario_count()):
        assert controller.phase is Phase.PLAYING
        assert controller.submit_selection(_right(catalog.scenario_at(i))) is True
        for _ in range(6):
            clock.advance(0.5)
            controller.update()

    assert controller.phase is Phase.RESULTS
    assert renderer.results == [(6, "URINAL MASTER")]


def test_game_completion_is_logged_with_summary(caplog: pytest.LogCaptureFixture) -> None:
    clock = FakeClock()
    controller = GameController(renderer=NullRenderer(), clock=clock)

    with caplog.at_level(logging.INFO, logger="urinal_game.game"):
        _play(controller, clock, [True, True, True, True, False, False])

    assert "game complete: score=4/6 (67%) rating=SOCIALLY AWARE" in caplog.text

    summary = game_summary_from_controller(controller)
    assert summary.score == 4
    assert summary.total == 6
    assert summary.percentage == 67
    assert summary.rating_title == "SOCIALLY AWARE"
    assert len(summary.answers) == 6
    assert summary.answers_text().startswith("#1:1+ #2:5+")
