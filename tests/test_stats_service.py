import itertools

from app.services import stats_service
from app.services.settlement_service import SettlementService
from app.services.stats_service import calculate_win_percentage


def scored_pick(make_pick, user, game, status, points=0.0, spread=-3.5):
    return make_pick(
        user,
        game,
        spread_at_pick=spread,
        status=status,
        result=f"{status}:{points:g}",
        points_earned=points,
    )


def test_win_percentage_counts_pushes_as_half():
    assert calculate_win_percentage(3, 1, 2) == 66.67


def test_win_percentage_zero_when_nothing_decided():
    assert calculate_win_percentage(0, 0, 0) == 0


def test_win_percentage_bounds():
    for wins, losses, pushes in itertools.product(range(5), repeat=3):
        assert 0 <= calculate_win_percentage(wins, losses, pushes) <= 100


def test_season_stats(make_user, make_game, make_pick):
    alice = make_user("alice")
    statuses = ["won", "won", "won", "lost", "pushed", "pushed", "pending"]
    for index, status in enumerate(statuses):
        game = make_game(week_id=f"2025-W0{index + 1}")
        scored_pick(make_pick, alice, game, status, 10.0 if status == "won" else 0.0)

    stats = stats_service.get_user_season_stats(alice.id)

    assert stats == {
        "total_points": 30.0,
        "wins": 3,
        "losses": 1,
        "pushes": 2,
        "win_percentage": 66.67,
    }


def test_season_stats_without_picks(make_user):
    alice = make_user("alice")

    stats = stats_service.get_user_season_stats(alice.id)

    assert stats["win_percentage"] == 0
    assert stats["wins"] + stats["losses"] + stats["pushes"] == 0


def test_season_stats_by_competition(make_user, make_game, make_pick):
    alice = make_user("alice")
    nfl = make_game(week_id="2025-W01")
    rugby = make_game(week_id="2025-W01", competition="six_nations",
                      home_team="France", away_team="Wales")
    scored_pick(make_pick, alice, nfl, "won", 10.0)
    scored_pick(make_pick, alice, rugby, "lost")

    assert stats_service.get_user_season_stats(alice.id, competition="nfl")["wins"] == 1
    assert stats_service.get_user_season_stats(alice.id, competition="six_nations")["losses"] == 1


def test_week_points(make_user, make_game, make_pick):
    alice = make_user("alice")
    week_one = make_game(week_id="2025-W01")
    week_one_late = make_game(week_id="2025-W01", home_team="Bills", away_team="Dolphins")
    week_two = make_game(week_id="2025-W02")
    scored_pick(make_pick, alice, week_one, "won", 10.0)
    scored_pick(make_pick, alice, week_one_late, "lost")
    scored_pick(make_pick, alice, week_two, "won", 10.0)

    assert stats_service.get_user_week_points(alice.id, "2025-W01") == 10.0
    assert stats_service.get_user_week_points(alice.id, "2025-W03") == 0.0


def test_stats_follow_settlement(make_user, make_game, make_pick):
    alice = make_user("alice")
    game = make_game(home_score=21, away_score=17, week_id="2025-W04")
    make_pick(alice, game, choice="away", spread_at_pick=-7.5)

    SettlementService().score_game(game.id)

    assert stats_service.get_user_week_points(alice.id, "2025-W04") == 10.0
    assert stats_service.get_user_season_stats(alice.id)["win_percentage"] == 100.0


def test_leaderboard_ranks_by_percentage_then_points(make_user, make_game, make_pick):
    alice = make_user("alice")
    bob = make_user("bob", display_name="Bobby")
    carol = make_user("carol")
    games = [make_game(week_id=f"2025-W0{i}") for i in range(1, 4)]

    scored_pick(make_pick, bob, games[0], "won", 10.0)
    scored_pick(make_pick, carol, games[0], "won", 10.0)
    scored_pick(make_pick, carol, games[1], "lost")
    scored_pick(make_pick, alice, games[0], "won", 10.0)
    scored_pick(make_pick, alice, games[1], "won", 10.0)
    scored_pick(make_pick, alice, games[2], "pushed")

    board = stats_service.get_leaderboard()

    assert [row["username"] for row in board] == ["bob", "alice", "carol"]
    assert [row["rank"] for row in board] == [1, 2, 3]
    assert board[0]["display_name"] == "Bobby"
    assert board[1]["win_percentage"] == 83.33


def test_leaderboard_tie_on_percentage_uses_points(make_user, make_game, make_pick):
    alice = make_user("alice")
    bob = make_user("bob")
    first = make_game(week_id="2025-W01")
    second = make_game(week_id="2025-W02")

    scored_pick(make_pick, alice, first, "won", 10.0)
    scored_pick(make_pick, bob, first, "won", 10.0)
    scored_pick(make_pick, bob, second, "won", 10.0)

    board = stats_service.get_leaderboard()

    assert [row["username"] for row in board] == ["bob", "alice"]


def test_leaderboard_for_one_week(make_user, make_game, make_pick):
    alice = make_user("alice")
    bob = make_user("bob")
    week_one = make_game(week_id="2025-W01")
    week_two = make_game(week_id="2025-W02")
    scored_pick(make_pick, alice, week_one, "won", 10.0)
    scored_pick(make_pick, bob, week_two, "won", 10.0)

    board = stats_service.get_leaderboard(week_id="2025-W02")

    assert [row["username"] for row in board] == ["bob"]


def test_weekly_performance_and_best_week(make_user, make_game, make_pick):
    alice = make_user("alice")
    w1 = make_game(week_id="2025-W01")
    w2a = make_game(week_id="2025-W02")
    w2b = make_game(week_id="2025-W02", home_team="Bills", away_team="Dolphins")
    scored_pick(make_pick, alice, w1, "lost")
    scored_pick(make_pick, alice, w2a, "won", 10.0)
    scored_pick(make_pick, alice, w2b, "pushed")

    weekly = stats_service.get_weekly_performance(alice.id)

    assert [week["week_id"] for week in weekly] == ["2025-W01", "2025-W02"]
    assert weekly[1] == {
        "week_id": "2025-W02",
        "wins": 1,
        "losses": 0,
        "pushes": 1,
        "points": 10.0,
    }
    assert stats_service.get_best_week(alice.id) == {
        "week_id": "2025-W02",
        "points": 10.0,
        "record": "1-0-1",
    }


def test_best_week_none_without_points(make_user, make_game, make_pick):
    alice = make_user("alice")
    scored_pick(make_pick, alice, make_game(), "lost")

    assert stats_service.get_best_week(alice.id) is None


def test_spread_performance_buckets(make_user, make_game, make_pick):
    alice = make_user("alice")
    scored_pick(make_pick, alice, make_game(week_id="2025-W01"), "won", 10.0, spread=-2.5)
    scored_pick(make_pick, alice, make_game(week_id="2025-W02"), "lost", spread=3)
    scored_pick(make_pick, alice, make_game(week_id="2025-W03"), "pushed", spread=7)
    scored_pick(make_pick, alice, make_game(week_id="2025-W04"), "won", 10.0, spread=10.5)
    scored_pick(make_pick, alice, make_game(week_id="2025-W05"), "pending", spread=1)

    small, medium, large = stats_service.get_spread_performance(alice.id)

    assert small["range"] == "Small (<3)"
    assert (small["wins"], small["total_picks"], small["win_rate"]) == (1, 1, 100.0)
    assert (medium["losses"], medium["total_picks"], medium["win_rate"]) == (1, 1, 0.0)
    assert (large["wins"], large["pushes"], large["total_picks"]) == (1, 1, 2)
    assert large["win_rate"] == 75.0


def test_team_performance_groups_by_backed_team(make_user, make_game, make_pick):
    alice = make_user("alice")
    jets_home = make_game(home_team="New York Jets", away_team="Buffalo Bills")
    jets_away = make_game(home_team="Miami Dolphins", away_team="New York Jets")
    bills_away = make_game(home_team="Denver Broncos", away_team="Buffalo Bills")
    make_pick(alice, jets_home, choice="home", status="won", points_earned=10.0)
    make_pick(alice, jets_away, choice="away", status="pushed", points_earned=0.0)
    make_pick(alice, bills_away, choice="away", status="lost", points_earned=0.0)

    teams = stats_service.get_team_performance(alice.id)

    assert [entry["team"] for entry in teams] == ["New York Jets", "Buffalo Bills"]
    assert teams[0] == {
        "team": "New York Jets",
        "picks": 2,
        "wins": 1,
        "losses": 0,
        "pushes": 1,
        "win_rate": 75.0,
    }
    assert teams[1]["win_rate"] == 0


def test_team_performance_respects_limit(make_user, make_game, make_pick):
    alice = make_user("alice")
    for home, away in [("A", "B"), ("C", "D"), ("E", "F")]:
        make_pick(alice, make_game(home_team=home, away_team=away), choice="home")

    assert len(stats_service.get_team_performance(alice.id, limit=2)) == 2


def test_pick_patterns_use_side_aware_favorites(make_user, make_game, make_pick):
    alice = make_user("alice")
    games = [
        make_game(home_team=f"Home {i}", away_team=f"Away {i}") for i in range(4)
    ]
    # Home favorite backed, away underdog backed, away favorite backed, pick'em
    make_pick(alice, games[0], choice="home", spread_at_pick=-3.5)
    make_pick(alice, games[1], choice="away", spread_at_pick=-7.0)
    make_pick(alice, games[2], choice="away", spread_at_pick=2.5)
    make_pick(alice, games[3], choice="home", spread_at_pick=0)

    patterns = stats_service.get_pick_patterns(alice.id)

    assert patterns == {
        "home_rate": 50.0,
        "away_rate": 50.0,
        "favorite_rate": 50.0,
        "underdog_rate": 25.0,
    }


def test_pick_patterns_without_picks(make_user):
    alice = make_user("alice")

    assert stats_service.get_pick_patterns(alice.id) == {
        "home_rate": 0,
        "away_rate": 0,
        "favorite_rate": 0,
        "underdog_rate": 0,
    }
