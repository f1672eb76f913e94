from __future__ import annotations

import pytest

from urinal_game.scenarios import (
    RATINGS,
    SCENARIOS,
    FeedbackBundle,
    FeedbackMessage,
    Fixture,
    FixtureKind,
    Rating,
    Scenario,
    ScenarioCatalog,
    ScenarioIndexError,
    default_catalog,
    resolve_rating,
)


def _feedback() -> FeedbackBundle:
    return FeedbackBundle(correct=FeedbackMessage("Yes", "good"), wrong=FeedbackMessage("No", "bad"))


def test_every_correct_answer_refers_to_an_unoccupied_fixture() -> None:
    for scenario in default_catalog().scenarios:
        assert scenario.correct_answers
        for idx in scenario.correct_answers:
            assert 0 <= idx < len(scenario.layout)
            assert scenario.layout[idx].occupied is False


def test_catalog_has_six_scenarios_numbered_in_order() -> None:
    catalog = default_catalog()
    assert catalog.scenario_count() == 6
    assert [catalog.scenario_at(i).id for i in range(6)] == [1, 2, 3, 4, 5, 6]


def test_first_scenario_is_five_free_urinals_with_either_end_correct() -> None:
    s = default_catalog().scenario_at(0)
    assert s.layout == tuple(Fixture(FixtureKind.URINAL, False) for _ in range(5))
    assert s.correct_answers == frozenset({0, 4})
    assert s.is_correct(0) and s.is_correct(4)
    assert not s.is_correct(2)


def test_last_scenario_expects_the_stall() -> None:
    s = default_catalog().scenario_at(5)
    assert s.layout[5].kind is FixtureKind.STALL
    assert s.correct_answers == frozenset({5})
    assert s.selectable_indices() == [1, 3, 5]


def test_scenario_at_out_of_range_raises() -> None:
    catalog = default_catalog()
    with pytest.raises(ScenarioIndexError):
        catalog.scenario_at(6)
    with pytest.raises(IndexError):
        catalog.scenario_at(-1)


@pytest.mark.parametrize(
    ("score", "title"),
    [
        (0, "SOCIAL MENACE"),
        (1, "ETIQUETTE VIOLATOR"),
        (2, "SPACE INVADER"),
        (3, "NEEDS PRACTICE"),
        (4, "SOCIALLY AWARE"),
        (5, "ETIQUETTE EXPERT"),
        (6, "URINAL MASTER"),
    ],
)
def test_resolve_rating_picks_largest_threshold_not_above_score(score: int, title: str) -> None:
    rating = resolve_rating(score)
    assert rating.title == title
    assert rating.min_score <= score


def test_resolve_rating_is_total_outside_the_score_range() -> None:
    assert resolve_rating(-3).title == "SOCIAL MENACE"
    assert resolve_rating(99).title == "URINAL MASTER"


def test_ratings_are_ordered_descending() -> None:
    thresholds = [r.min_score for r in default_catalog().ratings]
    assert thresholds == sorted(thresholds, reverse=True)
    assert thresholds[-1] == 0


def test_feedback_bundle_picks_message_by_outcome() -> None:
    fb = SCENARIOS[0].feedback
    assert fb.for_outcome(True).title == "Perfect!"
    assert fb.for_outcome(False).title == "Awkward!"


def test_scenario_rejects_occupied_correct_answer() -> None:
    with pytest.raises(ValueError):
        Scenario(
            id=1,
            problem_text="?",
            layout=(Fixture(FixtureKind.URINAL, True), Fixture(FixtureKind.URINAL, False)),
            correct_answers=frozenset({0}),
            feedback=_feedback(),
        )


def test_scenario_rejects_out_of_range_or_empty_answers() -> None:
    layout = (Fixture(FixtureKind.URINAL, False),)
    with pytest.raises(ValueError):
        Scenario(id=1, problem_text="?", layout=layout, correct_answers=frozenset({3}), feedback=_feedback())
    with pytest.raises(ValueError):
        Scenario(id=1, problem_text="?", layout=layout, correct_answers=frozenset(), feedback=_feedback())


def test_catalog_requires_catch_all_and_distinct_thresholds() -> None:
    with pytest.raises(ValueError):
        ScenarioCatalog(SCENARIOS, [Rating(1, "!", "ONE", "one")])
    with pytest.raises(ValueError):
        ScenarioCatalog(SCENARIOS, [Rating(0, "!", "A", "a"), Rating(0, "!", "B", "b")])


def test_catalog_requires_sequential_ids() -> None:
    with pytest.raises(ValueError):
        ScenarioCatalog([SCENARIOS[1]], RATINGS)
    with pytest.raises(ValueError):
        ScenarioCatalog([], RATINGS)


def test_catalog_sorts_ratings_given_in_any_order() -> None:
    catalog = ScenarioCatalog(SCENARIOS, reversed(RATINGS))
    assert catalog.resolve_rating(6).title == "URINAL MASTER"
    assert catalog.resolve_rating(3).title == "NEEDS PRACTICE"
