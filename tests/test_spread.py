import pytest

from app.utils.exceptions import InvalidInputError
from app.utils.spread import resolve_spread


def test_home_favorite_covers():
    result = resolve_spread(28, 14, -7.5)

    assert result.home_covers is True
    assert result.away_covers is False
    assert result.is_push is False
    assert result.actual_margin == 14
    assert result.adjusted_margin == 6.5


def test_home_favorite_loses_outright():
    result = resolve_spread(27, 29, -6.5)

    assert result.away_covers is True
    assert result.home_covers is False
    assert result.actual_margin == -2
    assert result.adjusted_margin == -8.5


def test_home_underdog_covers_while_losing():
    result = resolve_spread(20, 23, 3.5)

    assert result.home_covers is True
    assert result.actual_margin == -3


def test_exact_tie_after_spread_is_push():
    result = resolve_spread(24, 17, -7)

    assert result.is_push is True
    assert result.home_covers is False
    assert result.away_covers is False
    assert result.adjusted_margin == 0


def test_tied_game_with_no_spread_is_push():
    assert resolve_spread(17, 17, 0).is_push is True


@pytest.mark.parametrize(
    "home_score, away_score, spread",
    [(None, 10, -3.5), (10, None, -3.5), (10, 7, None)],
)
def test_missing_input_raises(home_score, away_score, spread):
    with pytest.raises(InvalidInputError):
        resolve_spread(home_score, away_score, spread)


@pytest.mark.parametrize(
    "home_score, away_score, spread",
    [
        (28, 14, float("nan")),
        (0, 50, float("inf")),
        (50, 0, float("-inf")),
        (float("nan"), 14, -3.5),
        (28, "14", -3.5),
    ],
)
def test_non_finite_or_non_numeric_inputs_raise(home_score, away_score, spread):
    with pytest.raises(InvalidInputError):
        resolve_spread(home_score, away_score, spread)
