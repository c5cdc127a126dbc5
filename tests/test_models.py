import pytest

from app.models.game import parse_score


@pytest.mark.parametrize("value, expected", [(28, 28), (21.0, 21), ("17", 17), (0, 0)])
def test_parse_score_accepts_whole_numbers(value, expected):
    assert parse_score(value, "Home") == expected


@pytest.mark.parametrize(
    "value", [27.9, -3, True, "3.5", "lots", float("nan"), float("inf")]
)
def test_parse_score_rejects_invalid_scores(value):
    with pytest.raises(ValueError):
        parse_score(value, "Home")


def test_record_final_score_sets_margin(make_game):
    game = make_game()
    assert game.margin is None
    assert game.status == "scheduled"

    game.record_final_score(17, 24)

    assert game.margin == -7
    assert game.status == "completed"


def test_record_final_score_leaves_game_unchanged_on_bad_input(make_game):
    game = make_game()

    with pytest.raises(ValueError):
        game.record_final_score(24, -1)

    assert game.home_score is None
    assert game.is_final is False


def test_pending_picks_count(make_user, make_game, make_pick):
    alice = make_user("alice")
    bob = make_user("bob")
    game = make_game()
    make_pick(alice, game)
    make_pick(bob, game, status="won")

    assert game.get_pending_picks_count() == 1
