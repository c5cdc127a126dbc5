import itertools

import pytest

from app.utils.exceptions import InvalidChoiceError, InvalidInputError
from app.utils.scoring import (
    LOST,
    MONEYLINE_FALLBACK_METHOD,
    PUSHED,
    SPREAD_METHOD,
    STANDARD_WIN_POINTS,
    WON,
    calculate_payout,
    evaluate_moneyline,
    evaluate_pick,
    outcome_status,
    payout_for,
)


@pytest.mark.parametrize(
    "home_score, away_score, spread, choice, user_won, points",
    [
        # Home needed to win by more than 6.5 and lost by 2
        (27, 29, -6.5, "home", False, 0),
        # Home won by 14, needed 7.5
        (28, 14, -7.5, "home", True, 10),
        # Home won by only 4, away covers
        (21, 17, -7.5, "away", True, 10),
        # Away wins outright
        (14, 21, -3.5, "away", True, 10),
    ],
)
def test_scoring_scenarios(home_score, away_score, spread, choice, user_won, points):
    evaluation = evaluate_pick(home_score, away_score, spread, choice)

    assert evaluation.user_won is user_won
    assert evaluation.is_push is False
    assert evaluation.points == points
    assert evaluation.scoring_method == SPREAD_METHOD


def test_standard_win_points_constant():
    assert STANDARD_WIN_POINTS == 10


def test_custom_win_points():
    evaluation = evaluate_pick(28, 14, -7.5, "home", win_points=3)

    assert evaluation.points == 3


@pytest.mark.parametrize("choice", ["home", "away"])
def test_push_never_wins(choice):
    evaluation = evaluate_pick(24, 17, -7, choice)

    assert evaluation.is_push is True
    assert evaluation.user_won is False
    assert evaluation.points == 0
    assert outcome_status(evaluation) == PUSHED


SCORES = [0, 3, 7, 10, 14, 17, 20, 24, 27]
SPREADS = [-14, -7, -6.5, -3, -2.5, 0, 1, 3.5, 7, 10.5]


def test_push_and_cover_properties():
    """Exactly one side wins unless the adjusted margin is zero"""
    for home, away, spread in itertools.product(SCORES, SCORES, SPREADS):
        home_pick = evaluate_pick(home, away, spread, "home")
        away_pick = evaluate_pick(home, away, spread, "away")

        if (home + spread) - away == 0:
            assert home_pick.is_push and away_pick.is_push
            assert home_pick.points == away_pick.points == 0
            assert not home_pick.user_won and not away_pick.user_won
        else:
            assert home_pick.user_won != away_pick.user_won


def test_evaluation_is_repeatable():
    first = evaluate_pick(21, 17, -7.5, "away")

    for _ in range(5):
        assert evaluate_pick(21, 17, -7.5, "away") == first


def test_invalid_choice_raises():
    with pytest.raises(InvalidChoiceError):
        evaluate_pick(21, 17, -7.5, "over")


def test_missing_spread_raises_without_fallback():
    with pytest.raises(InvalidInputError):
        evaluate_pick(21, 17, None, "home")


def test_missing_spread_uses_moneyline_when_allowed():
    evaluation = evaluate_pick(21, 17, None, "home", allow_moneyline_fallback=True)

    assert evaluation.user_won is True
    assert evaluation.points == 10
    assert evaluation.scoring_method == MONEYLINE_FALLBACK_METHOD
    assert evaluation.explanation.startswith("No spread recorded")


def test_fallback_does_not_rescue_missing_scores():
    with pytest.raises(InvalidInputError):
        evaluate_pick(None, 17, None, "home", allow_moneyline_fallback=True)


def test_nan_spread_is_rejected_even_with_fallback():
    with pytest.raises(InvalidInputError):
        evaluate_pick(28, 14, float("nan"), "home", allow_moneyline_fallback=True)


def test_moneyline_tie_is_push():
    evaluation = evaluate_moneyline(20, 20, "away")

    assert evaluation.is_push is True
    assert evaluation.points == 0


def test_explanation_describes_result():
    evaluation = evaluate_pick(28, 14, -7.5, "home")

    assert "Home won 28-14 (by 14)" in evaluation.explanation
    assert "needed to win by more than 7.5" in evaluation.explanation
    assert "home covers" in evaluation.explanation
    assert evaluation.explanation.endswith("WIN (+10 pts)")


def test_outcome_status_mapping():
    assert outcome_status(evaluate_pick(28, 14, -7.5, "home")) == WON
    assert outcome_status(evaluate_pick(28, 14, -7.5, "away")) == LOST


def test_payout_positive_odds():
    assert calculate_payout(10, 150) == pytest.approx(25)


def test_payout_negative_odds():
    assert calculate_payout(10, -150) == pytest.approx(16.67, abs=0.01)


@pytest.mark.parametrize("odds", [0, None])
def test_payout_rejects_zero_or_missing_odds(odds):
    with pytest.raises(InvalidInputError):
        calculate_payout(10, odds)


def test_payout_for_only_pays_wins():
    won = evaluate_pick(28, 14, -7.5, "home")
    lost = evaluate_pick(28, 14, -7.5, "away")

    assert payout_for(won, -150) == 16.67
    assert payout_for(won, None) is None
    assert payout_for(won, 0) is None
    assert payout_for(lost, 150) is None
