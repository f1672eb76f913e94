from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .game import AnswerRecord, GameController


@dataclass(frozen=True, slots=True)
class GameSummary:
    """End-of-game summary + answer log.

    Only ever logged; nothing is persisted between sessions.
    """

    score: int
    total: int
    percentage: int
    rating_title: str
    answers: tuple[AnswerRecord, ...]

    def answers_text(self) -> str:
        return " ".join(
            f"#{a.scenario_id}:{a.selected_index + 1}{'+' if a.was_correct else '-'}" for a in self.answers
        )


def game_summary_from_controller(controller: GameController) -> GameSummary:
    """Build a GameSummary from the controller's current state."""

    total = controller.catalog.scenario_count()
    score = int(controller.score)
    percentage = 0 if total == 0 else int(round(score / total * 100.0))
    rating = controller.catalog.resolve_rating(score)
    return GameSummary(
        score=score,
        total=int(total),
        percentage=percentage,
        rating_title=rating.title,
        answers=tuple(controller.answers()),
    )
