"""
Scoring Engine for Spread Pick'em

This module handles scoring calculations for individual picks: spread
outcome, awarded points and payout. Persisting results is the job of
SettlementService; aggregated statistics and leaderboards live in
StatsService (app/services/stats_service.py).
"""

import logging
from collections import namedtuple

from app.utils.exceptions import InvalidChoiceError, InvalidInputError
from app.utils.spread import resolve_spread

logger = logging.getLogger(__name__)

# Points awarded for a pick that covers. Override with SCORING_WIN_POINTS.
STANDARD_WIN_POINTS = 10

HOME = "home"
AWAY = "away"
CHOICES = (HOME, AWAY)

PENDING = "pending"
WON = "won"
LOST = "lost"
PUSHED = "pushed"

SPREAD_METHOD = "spread"
MONEYLINE_FALLBACK_METHOD = "moneyline_fallback"

PickEvaluation = namedtuple(
    "PickEvaluation",
    [
        "user_won",
        "is_push",
        "points",
        "explanation",
        "home_covers",
        "away_covers",
        "actual_margin",
        "adjusted_margin",
        "scoring_method",
    ],
)


def evaluate_pick(
    home_score,
    away_score,
    spread_at_pick,
    user_choice,
    win_points=STANDARD_WIN_POINTS,
    allow_moneyline_fallback=False,
):
    """
    Score one pick against the spread.

    Returns:
        PickEvaluation. A push never wins and never earns points, whichever
        side was picked.

    Args:
        home_score: Final home score
        away_score: Final away score
        spread_at_pick: Home-relative spread frozen at pick time
        user_choice: 'home' or 'away'
        win_points: Points for a covering pick
        allow_moneyline_fallback: Score a pick with no spread on the
            straight-up winner instead of raising
    """
    if user_choice not in CHOICES:
        raise InvalidChoiceError(user_choice)

    try:
        spread = resolve_spread(home_score, away_score, spread_at_pick)
    except InvalidInputError:
        if (
            not allow_moneyline_fallback
            or spread_at_pick is not None
            or home_score is None
            or away_score is None
        ):
            raise
        logger.warning(
            f"Spread missing for {user_choice} pick ({home_score}-{away_score}); "
            f"falling back to moneyline scoring"
        )
        return evaluate_moneyline(home_score, away_score, user_choice, win_points)

    return _build_evaluation(
        spread, home_score, away_score, spread_at_pick, user_choice, win_points,
        SPREAD_METHOD,
    )


def evaluate_moneyline(home_score, away_score, user_choice, win_points=STANDARD_WIN_POINTS):
    """Score a pick on the straight-up winner (a tied game is a push)"""
    if user_choice not in CHOICES:
        raise InvalidChoiceError(user_choice)

    spread = resolve_spread(home_score, away_score, 0)
    return _build_evaluation(
        spread, home_score, away_score, 0, user_choice, win_points,
        MONEYLINE_FALLBACK_METHOD,
    )


def _build_evaluation(
    spread, home_score, away_score, spread_at_pick, user_choice, win_points, method
):
    if spread.is_push:
        user_won = False
    elif user_choice == HOME:
        user_won = spread.home_covers
    else:
        user_won = spread.away_covers

    points = win_points if user_won else 0

    explanation = build_explanation(
        home_score, away_score, spread_at_pick, user_choice, spread, user_won, points
    )
    if method == MONEYLINE_FALLBACK_METHOD:
        explanation = f"No spread recorded, scored on the straight-up winner. {explanation}"

    return PickEvaluation(
        user_won=user_won,
        is_push=spread.is_push,
        points=points,
        explanation=explanation,
        home_covers=spread.home_covers,
        away_covers=spread.away_covers,
        actual_margin=spread.actual_margin,
        adjusted_margin=spread.adjusted_margin,
        scoring_method=method,
    )


def build_explanation(
    home_score, away_score, spread_at_pick, user_choice, spread, user_won, points
):
    """Human-readable audit trail for a scored pick"""
    margin = abs(spread.actual_margin)
    if spread.actual_margin > 0:
        game_result = f"Home won {home_score}-{away_score} (by {margin:g})"
    elif spread.actual_margin < 0:
        game_result = f"Away won {away_score}-{home_score} (by {margin:g})"
    else:
        game_result = f"Game tied {home_score}-{away_score}"

    spread_abs = abs(spread_at_pick)
    if spread_at_pick < 0:
        requirement = f"Home {spread_at_pick:g} (home needed to win by more than {spread_abs:g})"
    elif spread_at_pick > 0:
        requirement = f"Home +{spread_at_pick:g} (home could lose by up to {spread_abs:g})"
    else:
        requirement = "Pick 'em (no spread)"

    adjusted_home = home_score + spread_at_pick
    if spread.is_push:
        cover = f"With spread: {adjusted_home:.1f}-{away_score}, push"
    elif spread.home_covers:
        cover = f"With spread: {adjusted_home:.1f}-{away_score}, home covers"
    else:
        cover = f"With spread: {adjusted_home:.1f}-{away_score}, away covers"

    if spread.is_push:
        verdict = "PUSH"
    elif user_won:
        verdict = f"WIN (+{points:g} pts)"
    else:
        verdict = "LOSS"

    return f"{game_result}. {requirement}. {cover}. You picked {user_choice}. {verdict}"


def outcome_status(evaluation):
    """Map an evaluation onto the stored pick status"""
    if evaluation.is_push:
        return PUSHED
    return WON if evaluation.user_won else LOST


def calculate_payout(base_points, odds):
    """
    Calculate payout from American odds.

    +150 pays 1.5x the base on top of it, -150 pays 100/150 of it on top.
    Zero is not a valid American price and is rejected.
    """
    if odds is None or odds == 0:
        raise InvalidInputError(f"Invalid odds for payout: {odds!r}")

    if odds > 0:
        return base_points * (1 + odds / 100)
    return base_points * (1 + 100 / abs(odds))


def payout_for(evaluation, odds):
    """Payout to store for an evaluated pick, or None when nothing is paid"""
    if not evaluation.user_won or odds is None:
        return None

    if odds == 0:
        logger.warning("Pick has odds of 0 - treating as no odds, payout skipped")
        return None

    return round(calculate_payout(evaluation.points, odds), 2)
