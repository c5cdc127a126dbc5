"""
Point spread resolution.

Spreads are home-relative: the value is added to the home score as a
handicap. A negative spread means the home side is favored and has to win by
more than the spread; a positive spread means the home side may lose by up to
the spread and still cover.
"""

import math
from collections import namedtuple

from app.utils.exceptions import InvalidInputError

SpreadResult = namedtuple(
    "SpreadResult",
    ["home_covers", "away_covers", "is_push", "actual_margin", "adjusted_margin"],
)


def resolve_spread(home_score, away_score, spread_at_pick):
    """
    Decide which side covered the spread.

    Args:
        home_score: Final home score
        away_score: Final away score
        spread_at_pick: Home-relative spread frozen when the pick was made

    Returns:
        SpreadResult. On an exact tie after adjustment neither side covers
        and is_push is True.
    """
    if home_score is None or away_score is None or spread_at_pick is None:
        raise InvalidInputError("Missing required parameters for spread calculation")

    try:
        finite = all(math.isfinite(v) for v in (home_score, away_score, spread_at_pick))
    except TypeError:
        finite = False
    if not finite:
        raise InvalidInputError(
            f"Scores and spread must be finite numbers, got "
            f"{home_score!r}, {away_score!r}, {spread_at_pick!r}"
        )

    actual_margin = home_score - away_score
    adjusted_margin = (home_score + spread_at_pick) - away_score

    if adjusted_margin > 0:
        return SpreadResult(True, False, False, actual_margin, adjusted_margin)
    if adjusted_margin < 0:
        return SpreadResult(False, True, False, actual_margin, adjusted_margin)

    # Whole-number spreads can land exactly on the margin
    return SpreadResult(False, False, True, actual_margin, adjusted_margin)
