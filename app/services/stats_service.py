"""
Aggregated pick statistics and leaderboards.

Everything here is recomputed from stored Pick rows, so it always reflects
the latest settlement pass. A push counts as half a win in win percentages:
(wins + pushes / 2) / (wins + losses + pushes) * 100, rounded to 2 places.
Historical rankings were built with this formula, so keep it as is.
"""

from app import db
from app.models import Game, Pick, PickSet, User
from app.utils.cache_utils import cached_query
from app.utils.scoring import AWAY, HOME, LOST, PUSHED, WON

SPREAD_RANGES = [
    ("Small (<3)", 0, 3),
    ("Medium (3-7)", 3, 7),
    ("Large (>7)", 7, float("inf")),
]


def calculate_win_percentage(wins, losses, pushes):
    """Win percentage with pushes as half wins (0 when nothing is decided)"""
    total_games = wins + losses + pushes
    if total_games == 0:
        return 0
    return round((wins + pushes / 2) / total_games * 100, 2)


def _tally(picks):
    wins = losses = pushes = 0
    total_points = 0.0

    for pick in picks:
        if pick.status == WON:
            wins += 1
            total_points += pick.points_earned or 0
        elif pick.status == LOST:
            losses += 1
        elif pick.status == PUSHED:
            pushes += 1

    return {
        "total_points": total_points,
        "wins": wins,
        "losses": losses,
        "pushes": pushes,
        "win_percentage": calculate_win_percentage(wins, losses, pushes),
    }


def _user_picks_query(user_id, week_id=None, competition=None):
    query = Pick.query.join(PickSet, Pick.pick_set_id == PickSet.id).filter(
        PickSet.user_id == user_id
    )
    if week_id is not None:
        query = query.filter(PickSet.week_id == week_id)
    if competition is not None:
        query = query.join(Game, Pick.game_id == Game.id).filter(
            Game.competition == competition
        )
    return query


@cached_query("Pick", timeout=300)
def get_user_season_stats(user_id, competition=None):
    """
    Season totals for one user.

    Returns:
        dict with total_points, wins, losses, pushes and win_percentage.
        Pending picks are not counted.
    """
    picks = _user_picks_query(user_id, competition=competition).all()
    return _tally(picks)


@cached_query("Pick", timeout=300)
def get_user_week_points(user_id, week_id):
    """Points the user earned from won picks in one week"""
    total = (
        db.session.query(db.func.coalesce(db.func.sum(Pick.points_earned), 0.0))
        .join(PickSet, Pick.pick_set_id == PickSet.id)
        .filter(
            PickSet.user_id == user_id,
            PickSet.week_id == week_id,
            Pick.status == WON,
        )
        .scalar()
    )
    return float(total)


@cached_query("Pick", timeout=300)
def get_leaderboard(week_id=None, competition=None):
    """
    Rank every user with picks.

    Sorted by win percentage, then total points (both descending).
    """
    query = (
        db.session.query(User, Pick)
        .join(PickSet, PickSet.user_id == User.id)
        .join(Pick, Pick.pick_set_id == PickSet.id)
    )
    if week_id is not None:
        query = query.filter(PickSet.week_id == week_id)
    if competition is not None:
        query = query.join(Game, Pick.game_id == Game.id).filter(
            Game.competition == competition
        )

    users = {}
    picks_by_user = {}
    for user, pick in query.order_by(User.id, Pick.id).all():
        users[user.id] = user
        picks_by_user.setdefault(user.id, []).append(pick)

    leaderboard = []
    for user_id, picks in picks_by_user.items():
        user = users[user_id]
        entry = {
            "user_id": user.id,
            "username": user.username,
            "display_name": user.full_name,
        }
        entry.update(_tally(picks))
        leaderboard.append(entry)

    leaderboard.sort(
        key=lambda x: (x["win_percentage"], x["total_points"]), reverse=True
    )

    for rank, entry in enumerate(leaderboard, start=1):
        entry["rank"] = rank

    return leaderboard


@cached_query("Pick", timeout=300)
def get_weekly_performance(user_id):
    """Per-week record and points for a user, ordered by week id"""
    weeks = {}
    for pick in _user_picks_query(user_id).all():
        weeks.setdefault(pick.pick_set.week_id, []).append(pick)

    performance = []
    for week_id in sorted(weeks):
        stats = _tally(weeks[week_id])
        performance.append(
            {
                "week_id": week_id,
                "wins": stats["wins"],
                "losses": stats["losses"],
                "pushes": stats["pushes"],
                "points": stats["total_points"],
            }
        )
    return performance


def get_best_week(user_id):
    """Highest-scoring week as {week_id, points, record}, or None"""
    best = None
    for week in get_weekly_performance(user_id):
        if week["points"] > 0 and (best is None or week["points"] > best["points"]):
            best = {
                "week_id": week["week_id"],
                "points": week["points"],
                "record": f"{week['wins']}-{week['losses']}-{week['pushes']}",
            }
    return best


@cached_query("Pick", timeout=300)
def get_spread_performance(user_id):
    """Record by size of the spread taken (absolute value)"""
    decided = [
        pick
        for pick in _user_picks_query(user_id)
        .filter(Pick.status.in_([WON, LOST, PUSHED]))
        .all()
        if pick.spread_at_pick is not None
    ]

    performance = []
    for label, low, high in SPREAD_RANGES:
        bucket = [p for p in decided if low <= abs(p.spread_at_pick) < high]
        stats = _tally(bucket)
        performance.append(
            {
                "range": label,
                "wins": stats["wins"],
                "losses": stats["losses"],
                "pushes": stats["pushes"],
                "total_picks": len(bucket),
                "win_rate": stats["win_percentage"],
            }
        )
    return performance


@cached_query("Pick", timeout=300)
def get_team_performance(user_id, limit=5):
    """Record with each team the user has backed, most-picked teams first"""
    teams = {}
    for pick in _user_picks_query(user_id).all():
        team = pick.game.home_team if pick.choice == HOME else pick.game.away_team
        teams.setdefault(team, []).append(pick)

    performance = []
    for team, picks in teams.items():
        stats = _tally(picks)
        performance.append(
            {
                "team": team,
                "picks": len(picks),
                "wins": stats["wins"],
                "losses": stats["losses"],
                "pushes": stats["pushes"],
                "win_rate": stats["win_percentage"],
            }
        )

    performance.sort(key=lambda entry: (-entry["picks"], entry["team"]))
    return performance[:limit]


def _backed_favorite(pick):
    # Spreads are home-relative: negative means the home side is favored
    if pick.spread_at_pick is None or pick.spread_at_pick == 0:
        return None
    home_favored = pick.spread_at_pick < 0
    return home_favored if pick.choice == HOME else not home_favored


@cached_query("Pick", timeout=300)
def get_pick_patterns(user_id):
    """Share of picks (in percent) on home/away sides and on favorites/underdogs"""
    picks = _user_picks_query(user_id).all()
    total = len(picks)
    if total == 0:
        return {"home_rate": 0, "away_rate": 0, "favorite_rate": 0, "underdog_rate": 0}

    home = sum(1 for pick in picks if pick.choice == HOME)
    away = sum(1 for pick in picks if pick.choice == AWAY)
    backed = [_backed_favorite(pick) for pick in picks]
    favorites = sum(1 for value in backed if value is True)
    underdogs = sum(1 for value in backed if value is False)

    def rate(count):
        return round(count / total * 100, 2)

    return {
        "home_rate": rate(home),
        "away_rate": rate(away),
        "favorite_rate": rate(favorites),
        "underdog_rate": rate(underdogs),
    }
