"""Game controller: the finite-state machine behind The Urinal Game.

Title -> Playing -> Feedback -> Playing (next scenario) ... -> Results.
Restart goes Results -> Title -> Playing in one call.

The controller owns its GameState outright and drives an external Renderer.
Delays (reveal of the correct answer, the feedback transition, the optional
auto-advance) are single-shot callbacks on a TimerQueue fed by an injected
Clock; every callback re-checks the phase and round it was scheduled for
before touching state. Out-of-phase input is ignored and reported by a False
return value, never by an exception.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

from .clock import Clock, TimerHandle, TimerQueue
from .results import game_summary_from_controller
from .scenarios import FeedbackMessage, Fixture, Rating, Scenario, ScenarioCatalog, default_catalog

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    TITLE = "title"
    PLAYING = "playing"
    FEEDBACK = "feedback"
    RESULTS = "results"


class ScreenName(str, Enum):
    TITLE = "title"
    GAME = "game"
    FEEDBACK = "feedback"
    RESULTS = "results"


@dataclass(frozen=True, slots=True)
class AnswerRecord:
    scenario_id: int
    selected_index: int
    was_correct: bool


@dataclass(slots=True)
class GameState:
    phase: Phase = Phase.TITLE
    current_scenario_index: int = 0
    score: int = 0
    answers: list[AnswerRecord] = field(default_factory=list)
    is_transitioning: bool = False


@dataclass(frozen=True, slots=True)
class GameSnapshot:
    """Value copy of GameState (pure data)."""

    phase: Phase
    current_scenario_index: int
    score: int
    answers: tuple[AnswerRecord, ...]
    is_transitioning: bool


FEEDBACK_DELAY_ENV = "URINAL_FEEDBACK_DELAY_S"
REVEAL_DELAY_ENV = "URINAL_REVEAL_DELAY_S"
AUTO_ADVANCE_DELAY_ENV = "URINAL_AUTO_ADVANCE_DELAY_S"


@dataclass(frozen=True, slots=True)
class GameConfig:
    feedback_delay_s: float = 0.3
    reveal_delay_s: float = 0.2
    auto_advance_delay_s: float = 0.0  # 0 disables auto-advance
    total_scenarios: int | None = 6  # None skips the catalog size check

    def __post_init__(self) -> None:
        if self.feedback_delay_s < 0.0:
            raise ValueError("feedback_delay_s must be >= 0")
        if self.reveal_delay_s < 0.0:
            raise ValueError("reveal_delay_s must be >= 0")
        if self.auto_advance_delay_s < 0.0:
            raise ValueError("auto_advance_delay_s must be >= 0")
        if self.total_scenarios is not None and self.total_scenarios <= 0:
            raise ValueError("total_scenarios must be > 0")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "GameConfig":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            feedback_delay_s=_env_seconds(env, FEEDBACK_DELAY_ENV, defaults.feedback_delay_s),
            reveal_delay_s=_env_seconds(env, REVEAL_DELAY_ENV, defaults.reveal_delay_s),
            auto_advance_delay_s=_env_seconds(env, AUTO_ADVANCE_DELAY_ENV, defaults.auto_advance_delay_s),
            total_scenarios=defaults.total_scenarios,
        )


def _env_seconds(env: Mapping[str, str], name: str, fallback: float) -> float:
    raw = env.get(name, "").strip()
    if raw == "":
        return fallback
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from None


@runtime_checkable
class Renderer(Protocol):
    def render_layout(
        self,
        scenario_id: int,
        problem_text: str,
        layout: Sequence[Fixture],
        on_fixture_selected: Callable[[int], object],
    ) -> None: ...
    def highlight_selection(self, index: int) -> None: ...
    def reveal_correct_answers(self, indices: Sequence[int]) -> None: ...
    def disable_all_input(self) -> None: ...
    def show_screen(self, name: ScreenName) -> None: ...
    def update_score(self, score: int) -> None: ...
    def show_feedback(self, is_correct: bool, feedback: FeedbackMessage) -> None: ...
    def show_results(self, score: int, rating: Rating) -> None: ...


class RendererNotConfiguredError(RuntimeError):
    """The controller was built without a usable rendering collaborator."""


class GameController:
    def __init__(
        self,
        *,
        renderer: Renderer | None,
        clock: Clock,
        catalog: ScenarioCatalog | None = None,
        config: GameConfig | None = None,
        timers: TimerQueue | None = None,
    ) -> None:
        if renderer is None:
            raise RendererNotConfiguredError("no renderer was provided")
        if not isinstance(renderer, Renderer):
            raise RendererNotConfiguredError(f"{type(renderer).__name__} does not implement the Renderer protocol")

        self._renderer = renderer
        self._catalog = default_catalog() if catalog is None else catalog
        self._config = GameConfig() if config is None else config

        expected = self._config.total_scenarios
        if expected is not None and expected != self._catalog.scenario_count():
            raise ValueError(
                f"total_scenarios={expected} does not match catalog size {self._catalog.scenario_count()}"
            )

        self._timers = TimerQueue(clock) if timers is None else timers
        self._pending: list[TimerHandle] = []
        self._round = 0
        self._state = GameState()

    @property
    def phase(self) -> Phase:
        return self._state.phase

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def catalog(self) -> ScenarioCatalog:
        return self._catalog

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def is_transitioning(self) -> bool:
        return self._state.is_transitioning

    def is_playing(self) -> bool:
        return self._state.phase is Phase.PLAYING

    def answers(self) -> list[AnswerRecord]:
        return list(self._state.answers)

    def snapshot(self) -> GameSnapshot:
        s = self._state
        return GameSnapshot(
            phase=s.phase,
            current_scenario_index=s.current_scenario_index,
            score=s.score,
            answers=tuple(s.answers),
            is_transitioning=s.is_transitioning,
        )

    def current_scenario(self) -> Scenario | None:
        if self._state.phase not in (Phase.PLAYING, Phase.FEEDBACK):
            return None
        return self._catalog.scenario_at(self._state.current_scenario_index)

    def update(self) -> None:
        self._timers.update()

    # -- transitions -------------------------------------------------------

    def start(self) -> bool:
        if self._state.is_transitioning:
            return False

        self._reset_state()
        self._state.phase = Phase.PLAYING
        logger.debug("game started")

        self._renderer.update_score(0)
        self._load_scenario(0)
        self._renderer.show_screen(ScreenName.GAME)
        return True

    def restart(self) -> bool:
        if self._state.is_transitioning:
            return False
        logger.debug("restart requested from %s", self._state.phase.value)
        return self.start()

    def submit_selection(self, fixture_index: int) -> bool:
        state = self._state
        if state.phase is not Phase.PLAYING or state.is_transitioning:
            return False

        state.is_transitioning = True
        scenario = self._catalog.scenario_at(state.current_scenario_index)

        if not (0 <= fixture_index < len(scenario.layout)) or scenario.layout[fixture_index].occupied:
            logger.warning(
                "scenario %d: selection %d is not an available fixture; scoring it as incorrect",
                scenario.id,
                fixture_index,
            )

        is_correct = scenario.is_correct(fixture_index)
        state.answers.append(
            AnswerRecord(scenario_id=scenario.id, selected_index=fixture_index, was_correct=is_correct)
        )
        if is_correct:
            state.score += 1
            self._renderer.update_score(state.score)

        logger.debug("scenario %d: selected %d, correct=%s", scenario.id, fixture_index, is_correct)

        self._renderer.highlight_selection(fixture_index)
        self._renderer.disable_all_input()

        round_id = self._round
        if not is_correct:
            correct = sorted(scenario.correct_answers)
            # The reveal must land before (or together with) the feedback transition.
            self._schedule(
                min(self._config.reveal_delay_s, self._config.feedback_delay_s),
                lambda: self._reveal_correct(round_id, correct),
                label="reveal",
            )
        self._schedule(
            self._config.feedback_delay_s,
            lambda: self._enter_feedback(round_id, is_correct, scenario),
            label="feedback",
        )
        return True

    def advance(self) -> bool:
        state = self._state
        if state.is_transitioning or state.phase is not Phase.FEEDBACK:
            return False

        self._cancel_pending()
        next_index = state.current_scenario_index + 1
        if next_index >= self._catalog.scenario_count():
            self._show_results()
            return True

        state.phase = Phase.PLAYING
        self._load_scenario(next_index)
        self._renderer.show_screen(ScreenName.GAME)
        return True

    # -- internals ---------------------------------------------------------

    def _reset_state(self) -> None:
        self._cancel_pending()
        self._round += 1
        self._state = GameState()

    def _load_scenario(self, index: int) -> None:
        scenario = self._catalog.scenario_at(index)
        self._round += 1
        self._state.current_scenario_index = index
        self._renderer.render_layout(scenario.id, scenario.problem_text, scenario.layout, self.submit_selection)

    def _reveal_correct(self, round_id: int, indices: list[int]) -> None:
        if round_id != self._round or self._state.phase is not Phase.PLAYING:
            return
        self._renderer.reveal_correct_answers(indices)

    def _enter_feedback(self, round_id: int, is_correct: bool, scenario: Scenario) -> None:
        if round_id != self._round or self._state.phase is not Phase.PLAYING:
            return

        self._state.phase = Phase.FEEDBACK
        self._state.is_transitioning = False

        self._renderer.show_feedback(is_correct, scenario.feedback.for_outcome(is_correct))
        self._renderer.show_screen(ScreenName.FEEDBACK)

        if self._config.auto_advance_delay_s > 0.0:
            self._schedule(
                self._config.auto_advance_delay_s,
                lambda: self._auto_advance(round_id),
                label="auto_advance",
            )

    def _auto_advance(self, round_id: int) -> None:
        if round_id != self._round or self._state.phase is not Phase.FEEDBACK:
            return
        self.advance()

    def _show_results(self) -> None:
        self._state.phase = Phase.RESULTS
        self._state.is_transitioning = False

        rating = self._catalog.resolve_rating(self._state.score)
        self._renderer.show_results(self._state.score, rating)
        self._renderer.show_screen(ScreenName.RESULTS)

        summary = game_summary_from_controller(self)
        logger.info(
            "game complete: score=%d/%d (%d%%) rating=%s answers=%s",
            summary.score,
            summary.total,
            summary.percentage,
            summary.rating_title,
            summary.answers_text(),
        )

    def _schedule(self, delay_s: float, callback: Callable[[], None], *, label: str) -> None:
        logger.debug("scheduling %s in %.3fs", label, delay_s)
        self._pending = [h for h in self._pending if h.pending]
        self._pending.append(self._timers.schedule(delay_s, callback, label=label))

    def _cancel_pending(self) -> None:
        for handle in self._pending:
            handle.cancel()
        self._pending.clear()
