"""Static scenario catalog and rating table for The Urinal Game.

Each scenario defines the restroom layout, which fixtures count as a correct
choice, and the feedback shown for either outcome. The catalog is immutable
and validated once at construction, so it is safe to share between any number
of controllers.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class FixtureKind(str, Enum):
    URINAL = "urinal"
    STALL = "stall"


@dataclass(frozen=True, slots=True)
class Fixture:
    kind: FixtureKind
    occupied: bool = False


@dataclass(frozen=True, slots=True)
class FeedbackMessage:
    title: str
    message: str


@dataclass(frozen=True, slots=True)
class FeedbackBundle:
    correct: FeedbackMessage
    wrong: FeedbackMessage

    def for_outcome(self, is_correct: bool) -> FeedbackMessage:
        return self.correct if is_correct else self.wrong


@dataclass(frozen=True, slots=True)
class Scenario:
    id: int  # 1-based ordinal
    problem_text: str
    layout: tuple[Fixture, ...]
    correct_answers: frozenset[int]
    feedback: FeedbackBundle

    def __post_init__(self) -> None:
        if self.id < 1:
            raise ValueError("scenario id must be >= 1")
        if not self.layout:
            raise ValueError(f"scenario {self.id}: layout must not be empty")
        if not self.correct_answers:
            raise ValueError(f"scenario {self.id}: correct_answers must not be empty")
        for idx in self.correct_answers:
            if not (0 <= idx < len(self.layout)):
                raise ValueError(f"scenario {self.id}: correct answer {idx} is outside the layout")
            if self.layout[idx].occupied:
                raise ValueError(f"scenario {self.id}: correct answer {idx} is an occupied fixture")

    def is_correct(self, index: int) -> bool:
        return index in self.correct_answers

    def selectable_indices(self) -> list[int]:
        return [i for i, f in enumerate(self.layout) if not f.occupied]


@dataclass(frozen=True, slots=True)
class Rating:
    min_score: int
    emoji: str
    title: str
    message: str


class ScenarioIndexError(IndexError):
    """Raised when a scenario index falls outside the catalog."""


class ScenarioCatalog:
    """Read-only, ordered scenario list plus the score -> rating lookup."""

    def __init__(self, scenarios: Iterable[Scenario], ratings: Iterable[Rating]) -> None:
        self._scenarios = tuple(scenarios)
        # Descending by threshold; sort is stable so duplicate thresholds keep declaration order.
        self._ratings = tuple(sorted(ratings, key=lambda r: r.min_score, reverse=True))

        if not self._scenarios:
            raise ValueError("catalog must contain at least one scenario")
        for expected_id, scenario in enumerate(self._scenarios, start=1):
            if scenario.id != expected_id:
                raise ValueError(f"scenario ids must be 1..N in order (got {scenario.id} at position {expected_id})")

        thresholds = [r.min_score for r in self._ratings]
        if len(set(thresholds)) != len(thresholds):
            raise ValueError("rating thresholds must be distinct")
        if 0 not in thresholds:
            raise ValueError("ratings must include a catch-all threshold of 0")

    @property
    def scenarios(self) -> tuple[Scenario, ...]:
        return self._scenarios

    @property
    def ratings(self) -> tuple[Rating, ...]:
        return self._ratings

    def scenario_count(self) -> int:
        return len(self._scenarios)

    def scenario_at(self, index: int) -> Scenario:
        if not (0 <= index < len(self._scenarios)):
            raise ScenarioIndexError(f"scenario index {index} out of range (catalog has {len(self._scenarios)})")
        return self._scenarios[index]

    def resolve_rating(self, score: int) -> Rating:
        for rating in self._ratings:
            if score >= rating.min_score:
                return rating
        return self._ratings[-1]


def _urinals(*occupied: bool) -> tuple[Fixture, ...]:
    return tuple(Fixture(FixtureKind.URINAL, occ) for occ in occupied)


_STALL = Fixture(FixtureKind.STALL, False)


SCENARIOS: tuple[Scenario, ...] = (
    # Empty restroom: either end.
    Scenario(
        id=1,
        problem_text="You enter an empty restroom with 5 urinals. Which do you choose?",
        layout=_urinals(False, False, False, False, False),
        correct_answers=frozenset({0, 4}),
        feedback=FeedbackBundle(
            correct=FeedbackMessage(
                "Perfect!",
                "Always choose an end urinal when the bathroom is empty. "
                "This maximizes future spacing options for others.",
            ),
            wrong=FeedbackMessage(
                "Awkward!",
                "When the bathroom is empty, always pick an end urinal. Choosing a middle urinal "
                "limits spacing options and is considered poor etiquette.",
            ),
        ),
    ),
    Scenario(
        id=2,
        problem_text="One person is using the far left urinal. Where do you go?",
        layout=_urinals(True, False, False, False, False),
        correct_answers=frozenset({4}),
        feedback=FeedbackBundle(
            correct=FeedbackMessage(
                "Excellent!",
                "You chose the urinal furthest from the occupied one. Maximum buffer zone achieved!",
            ),
            wrong=FeedbackMessage(
                "Too Close!",
                "Always maximize distance from others. The far right urinal gives you the most space "
                "and respects the buffer zone.",
            ),
        ),
    ),
    Scenario(
        id=3,
        problem_text="Someone is using the middle urinal. What's your move?",
        layout=_urinals(False, False, True, False, False),
        correct_answers=frozenset({0, 4}),
        feedback=FeedbackBundle(
            correct=FeedbackMessage(
                "Smart Choice!",
                "Either end urinal maintains maximum distance from the middle. "
                "You've mastered the art of strategic positioning.",
            ),
            wrong=FeedbackMessage(
                "Personal Space Violation!",
                "Never stand next to someone when end urinals are available. The corners are your friends!",
            ),
        ),
    ),
    # Both ends taken; the true middle keeps equal distance.
    Scenario(
        id=4,
        problem_text="Both end urinals are occupied. What do you do?",
        layout=_urinals(True, False, False, False, True) + (_STALL,),
        correct_answers=frozenset({2}),
        feedback=FeedbackBundle(
            correct=FeedbackMessage(
                "Perfectly Centered!",
                "The middle urinal maintains equal distance from both occupied ends. Geometry meets etiquette!",
            ),
            wrong=FeedbackMessage(
                "Unbalanced!",
                "When both ends are occupied, the exact middle urinal is optimal. "
                "It maintains equal buffer zones on both sides.",
            ),
        ),
    ),
    Scenario(
        id=5,
        problem_text="A tricky situation! Find the best available spot.",
        layout=_urinals(True, False, True, False, False, True),
        correct_answers=frozenset({4}),
        feedback=FeedbackBundle(
            correct=FeedbackMessage(
                "Expert Navigation!",
                "You found the spot with the most breathing room. Only one neighbor instead of being sandwiched!",
            ),
            wrong=FeedbackMessage(
                "Strategic Error!",
                "Position 5 (second from right) only has one occupied neighbor. "
                "Position 2 would sandwich you between two occupied urinals!",
            ),
        ),
    ),
    # Every free urinal is next to someone: take the stall.
    Scenario(
        id=6,
        problem_text="The restroom is getting crowded. Choose wisely!",
        layout=_urinals(True, False, True, False, True) + (_STALL,),
        correct_answers=frozenset({5}),
        feedback=FeedbackBundle(
            correct=FeedbackMessage(
                "Wise Decision!",
                "When all urinals would put you next to someone, the stall is the dignified choice. "
                "Privacy preserved!",
            ),
            wrong=FeedbackMessage(
                "Awkward Encounter!",
                "Every available urinal is directly next to an occupied one. "
                "A true etiquette master uses the stall in this situation.",
            ),
        ),
    ),
)


RATINGS: tuple[Rating, ...] = (
    Rating(
        6,
        "\U0001f3c6",
        "URINAL MASTER",
        "Flawless! You've achieved peak restroom etiquette. Others should learn from your ways.",
    ),
    Rating(
        5,
        "\U0001f396\ufe0f",
        "ETIQUETTE EXPERT",
        "Impressive! You understand the unwritten rules. Just one small slip-up.",
    ),
    Rating(
        4,
        "\U0001f44d",
        "SOCIALLY AWARE",
        "Pretty good! You've got the basics down but could use some fine-tuning.",
    ),
    Rating(
        3,
        "\U0001f610",
        "NEEDS PRACTICE",
        "You might be making some folks uncomfortable. Study the buffer zone!",
    ),
    Rating(
        2,
        "\U0001f62c",
        "SPACE INVADER",
        "Personal space is important! You're that guy everyone tries to avoid.",
    ),
    Rating(
        1,
        "\U0001f6a8",
        "ETIQUETTE VIOLATOR",
        "Did you grow up in a barn? Please review basic restroom protocols.",
    ),
    Rating(
        0,
        "\U0001f480",
        "SOCIAL MENACE",
        "Incredible... You got every single one wrong. Are you doing this on purpose?",
    ),
)


_DEFAULT_CATALOG = ScenarioCatalog(SCENARIOS, RATINGS)


def default_catalog() -> ScenarioCatalog:
    return _DEFAULT_CATALOG


def resolve_rating(score: int) -> Rating:
    """Resolve a rating against the built-in rating table."""

    return _DEFAULT_CATALOG.resolve_rating(score)
