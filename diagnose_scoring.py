#!/usr/bin/env python
"""Diagnose why picks aren't being scored"""
from app import create_app
from app.models import Game, Pick

app = create_app()

with app.app_context():
    print("=== Scoring Diagnostics ===\n")

    # Final games that still have pending picks
    print("=== Final Games with Pending Picks ===")

    final_games = Game.query.filter_by(is_final=True).order_by(Game.week_id).all()
    print(f"Total final games: {len(final_games)}")

    pending_count = 0
    for game in final_games:
        count = game.get_pending_picks_count()
        if not count:
            continue

        pending_count += count
        p = game.picks.filter_by(status="pending").first()
        print(f"\n{game.week_id} - Game {game.id}:")
        print(f"  {game.away_team} {game.away_score} @ {game.home_team} {game.home_score}")
        print(f"  has_final_score={game.has_final_score}, home margin={game.margin}")
        print(f"  Pending picks: {count}")

        print(f"  Example: Pick {p.id} - choice={p.choice}, spread={p.spread_at_pick}, odds={p.odds}")

    print(f"\n{'=' * 60}")
    print(f"Total pending picks on final games: {pending_count}")

    # Picks that cannot be scored against the spread
    print("\n=== Picks Missing a Spread ===")
    no_spread = Pick.query.filter(Pick.spread_at_pick.is_(None)).all()
    print(f"Total: {len(no_spread)}")
    for pick in no_spread[:10]:
        print(f"  Pick {pick.id} (game {pick.game_id}): status={pick.status}")

    print("\n=== Picks Scored by Moneyline Fallback ===")
    fallback = Pick.query.filter_by(scoring_method="moneyline_fallback").count()
    print(f"Total: {fallback}")

    print(f"\n{'=' * 60}")
    print("=== Summary ===")
    print("If you see pending picks on final games, run:")
    print("  python manage.py score completed")
