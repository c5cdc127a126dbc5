#!/usr/bin/env python
"""Check stored pick points against the aggregated stats for given users"""
import sys

from app import create_app
from app.models import Game, Pick, PickSet, User
from app.services import stats_service

app = create_app()

with app.app_context():
    usernames = sys.argv[1:]
    if not usernames:
        print("Usage: python check_user_scores.py USERNAME [USERNAME ...]")
        sys.exit(1)

    users = User.query.filter(User.username.in_(usernames)).all()

    for user in users:
        print(f"\n{'=' * 60}")
        print(f"User: {user.username} (ID: {user.id})")
        print(f"{'=' * 60}")

        season = stats_service.get_user_season_stats(user.id)
        print("\nSeason Stats:")
        print(f"  Total Points: {season['total_points']}")
        print(f"  Wins: {season['wins']}")
        print(f"  Losses: {season['losses']}")
        print(f"  Pushes: {season['pushes']}")
        print(f"  Win %: {season['win_percentage']}")

        picks = (
            Pick.query.join(PickSet)
            .join(Game)
            .filter(PickSet.user_id == user.id, Game.is_final.is_(True))
            .order_by(PickSet.week_id)
            .all()
        )

        print("\nAll Final Game Picks:")
        total_manual = 0
        for pick in picks:
            game = pick.game
            if pick.status == "won":
                total_manual += pick.points_earned or 0
            print(
                f"  {pick.week_id}: {game.away_team}@{game.home_team} "
                f"{game.away_score}-{game.home_score} | {pick.choice} {pick.spread_at_pick} | "
                f"{pick.status.upper()} | Points: {pick.points_earned} | Payout: {pick.payout}"
            )

        print(f"\nManual Total: {total_manual}")
        print(f"Calculated Total: {season['total_points']}")

        if abs(total_manual - season["total_points"]) > 0.01:
            print(f"MISMATCH! Difference: {abs(total_manual - season['total_points'])}")
