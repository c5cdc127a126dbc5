import pytest

from app import create_app, db
from app.models import Game, Pick, PickSet, User

ADMIN_HEADERS = {"X-Admin-Token": "test-admin-token"}


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def make_user(app):
    def _make(username="alice", display_name=None):
        user = User(username=username, display_name=display_name)
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def make_game(app):
    def _make(
        home_score=None,
        away_score=None,
        is_final=None,
        week_id="2025-W01",
        competition="nfl",
        home_team="New York Jets",
        away_team="Tampa Bay Buccaneers",
    ):
        if is_final is None:
            is_final = home_score is not None and away_score is not None
        game = Game(
            week_id=week_id,
            competition=competition,
            home_team=home_team,
            away_team=away_team,
            home_score=home_score,
            away_score=away_score,
            is_final=is_final,
        )
        db.session.add(game)
        db.session.commit()
        return game

    return _make


@pytest.fixture
def make_pick(app):
    def _make(user, game, choice="home", spread_at_pick=-3.5, odds=None, **fields):
        pick_set = PickSet.get_or_create(user.id, game.week_id)
        pick = Pick(
            pick_set_id=pick_set.id,
            game_id=game.id,
            choice=choice,
            spread_at_pick=spread_at_pick,
            odds=odds,
            **fields,
        )
        db.session.add(pick)
        db.session.commit()
        return pick

    return _make
