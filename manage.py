#!/usr/bin/env python3
"""
Spread Pick'em Management CLI

Operator commands for scoring games, recalculating results and inspecting
statistics.
"""

import logging

import click
from flask.cli import with_appcontext
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import create_app, db
from app.models import Game, Pick, User
from app.services import stats_service
from app.services.settlement_service import SettlementService, summarize
from app.utils.cache_utils import get_cache_stats
from app.utils.exceptions import ScoringError


def echo_summary(outcomes):
    """Print one line per failed pick and a status summary"""
    for outcome in outcomes:
        if outcome.error:
            click.echo(f"   ⚠️  Pick {outcome.pick_id}: {outcome.error}")

    summary = summarize(outcomes)
    click.echo(
        f"✅ Scored {summary['total']} picks: "
        f"{summary.get('won', 0)} won, {summary.get('lost', 0)} lost, "
        f"{summary.get('pushed', 0)} pushed, {summary.get('pending', 0)} pending"
    )
    if summary["errors"]:
        click.echo(f"⚠️  {summary['errors']} picks could not be scored")


@click.group()
def cli():
    """Spread Pick'em Management CLI"""
    pass


# Scoring Commands
@cli.group()
def score():
    """Scoring commands"""
    pass


@score.command("game")
@click.argument("game_id", type=int)
@with_appcontext
def score_game(game_id):
    """Score all picks for a game"""
    try:
        outcomes = SettlementService().score_game(game_id)
        echo_summary(outcomes)
    except ScoringError as e:
        click.echo(f"❌ {e}")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error scoring game {game_id}: {str(e)}")
        logging.error(f"Scoring game {game_id} failed - SQL error: {e}")


@score.command("week")
@click.argument("week_id")
@with_appcontext
def score_week(week_id):
    """Score all picks for every game in a week"""
    try:
        outcomes = SettlementService().score_week(week_id)
        echo_summary(outcomes)
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error scoring week {week_id}: {str(e)}")
        logging.error(f"Scoring week {week_id} failed - SQL error: {e}")


@score.command("completed")
@with_appcontext
def score_completed():
    """Score every completed game that still has pending picks"""
    try:
        outcomes = SettlementService().score_completed_games()
        if not outcomes:
            click.echo("✅ No completed games with pending picks")
            return
        echo_summary(outcomes)
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error during scoring sweep: {str(e)}")
        logging.error(f"Scoring sweep failed - SQL error: {e}")


@score.command("recalc")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@with_appcontext
def recalc(yes):
    """Rescore every game that has picks"""
    if not yes and not click.confirm("Rescore all picks?"):
        click.echo("Cancelled.")
        return

    try:
        outcomes = SettlementService().recalculate_all()
        echo_summary(outcomes)
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error during recalculation: {str(e)}")
        logging.error(f"Recalculation failed - SQL error: {e}")


@score.command("result")
@click.argument("game_id", type=int)
@click.argument("home_score", type=int)
@click.argument("away_score", type=int)
@with_appcontext
def record_result(game_id, home_score, away_score):
    """Record a final score for a game and score its picks"""
    try:
        outcomes = SettlementService().record_result_and_score(
            game_id, home_score, away_score
        )
        click.echo(f"✅ Game {game_id} final: {home_score}-{away_score} (home-away)")
        echo_summary(outcomes)
    except ScoringError as e:
        click.echo(f"❌ {e}")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database error recording result: {str(e)}")
        logging.error(f"Recording result for game {game_id} failed - SQL error: {e}")


# Statistics Commands
@cli.group()
def stats():
    """Statistics commands"""
    pass


@stats.command("user")
@click.argument("user_id", type=int)
@click.option("--competition", help="Only count picks for this competition")
@with_appcontext
def user_stats(user_id, competition):
    """Show season stats for a user"""
    user = db.session.get(User, user_id)
    if not user:
        click.echo(f"❌ User {user_id} not found!")
        return

    season = stats_service.get_user_season_stats(user_id, competition=competition)
    click.echo(f"📊 {user.full_name}")
    click.echo(
        f"   Record: {season['wins']}-{season['losses']}-{season['pushes']} "
        f"({season['win_percentage']}%)"
    )
    click.echo(f"   Points: {season['total_points']:g}")

    for week in stats_service.get_weekly_performance(user_id):
        click.echo(
            f"   {week['week_id']}: {week['wins']}-{week['losses']}-{week['pushes']} "
            f"{week['points']:g} pts"
        )


@stats.command("leaderboard")
@click.option("--week", "week_id", help="Only count picks for this week")
@click.option("--competition", help="Only count picks for this competition")
@with_appcontext
def leaderboard(week_id, competition):
    """Show the leaderboard"""
    rows = stats_service.get_leaderboard(week_id=week_id, competition=competition)

    if not rows:
        click.echo("No scored picks yet.")
        return

    for row in rows:
        click.echo(
            f"{row['rank']:>3}. {row['display_name']:<20} "
            f"{row['win_percentage']:>6}%  {row['total_points']:g} pts  "
            f"({row['wins']}-{row['losses']}-{row['pushes']})"
        )


# Database Commands
@cli.group()
def db_cmd():
    """Database commands"""
    pass


@db_cmd.command()
@with_appcontext
def init_db():
    """Initialize database tables"""
    try:
        db.create_all()
        click.echo("✅ Database tables created successfully!")
    except SQLAlchemyError as e:
        click.echo(f"❌ Error initializing database: {str(e)}")


# Info Commands
@cli.command()
@with_appcontext
def status():
    """Show application status"""
    click.echo("🏈 Spread Pick'em Status")
    click.echo("=" * 40)

    try:
        db.session.execute(text("SELECT 1"))
        click.echo("✅ Database: Connected")
    except SQLAlchemyError as e:
        click.echo(f"❌ Database: Error - {str(e)}")
        return

    game_count = Game.query.count()
    final_count = Game.query.filter_by(is_final=True).count()
    click.echo(f"🏈 Games: {final_count}/{game_count} completed")

    pending_count = Pick.query.filter_by(status="pending").count()
    click.echo(f"⏳ Pending picks: {pending_count}")

    cache_stats = get_cache_stats()
    click.echo(f"🗄️  Cache: {cache_stats['type']} (timeout {cache_stats['timeout']}s)")


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        cli()
