import hmac
import logging
from functools import wraps

from flask import abort, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from app import db, limiter
from app.models import User
from app.routes.api import bp
from app.services import stats_service
from app.services.settlement_service import SettlementService, summarize

logger = logging.getLogger(__name__)


def admin_token_required(f):
    """Require the X-Admin-Token header to match ADMIN_API_TOKEN"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get("ADMIN_API_TOKEN")
        provided = request.headers.get("X-Admin-Token", "")
        if not expected or not hmac.compare_digest(provided, expected):
            abort(403)
        return f(*args, **kwargs)

    return decorated_function


def add_no_cache_headers(f):
    """Keep scoring responses out of shared caches"""

    @wraps(f)
    def decorated_function(*args, **kwargs):
        response = f(*args, **kwargs)
        if hasattr(response, "headers"):
            response.headers["Cache-Control"] = (
                "no-store, no-cache, must-revalidate, max-age=0"
            )
        return response

    return decorated_function


def outcomes_response(outcomes):
    return jsonify(
        {
            "success": True,
            "summary": summarize(outcomes),
            "outcomes": [outcome._asdict() for outcome in outcomes],
        }
    )


def scoring_failed(error):
    db.session.rollback()
    logger.error(f"Scoring request failed: {error}", exc_info=True)
    return jsonify({"success": False, "error": "Failed to score"}), 500


def get_user_or_404(user_id):
    user = db.session.get(User, user_id)
    if user is None:
        abort(404)
    return user


# Admin scoring triggers


@bp.route("/admin/games/<int:game_id>/score", methods=["POST"])
@limiter.limit("60 per minute")
@admin_token_required
@add_no_cache_headers
def score_game(game_id):
    """Score all picks for one game"""
    try:
        outcomes = SettlementService().score_game(game_id)
    except SQLAlchemyError as e:
        return scoring_failed(e)
    return outcomes_response(outcomes)


@bp.route("/admin/weeks/<week_id>/score", methods=["POST"])
@limiter.limit("30 per minute")
@admin_token_required
@add_no_cache_headers
def score_week(week_id):
    """Score all picks for every game in a week"""
    try:
        outcomes = SettlementService().score_week(week_id)
    except SQLAlchemyError as e:
        return scoring_failed(e)
    return outcomes_response(outcomes)


@bp.route("/admin/score-completed-games", methods=["POST"])
@limiter.limit("30 per minute")
@admin_token_required
@add_no_cache_headers
def score_completed_games():
    """Score every completed game that still has pending picks"""
    try:
        outcomes = SettlementService().score_completed_games()
    except SQLAlchemyError as e:
        return scoring_failed(e)
    return outcomes_response(outcomes)


@bp.route("/admin/games/<int:game_id>/result", methods=["POST"])
@limiter.limit("60 per minute")
@admin_token_required
@add_no_cache_headers
def record_game_result(game_id):
    """Record a final score and settle the game's picks"""
    data = request.get_json(silent=True) or {}
    home_score = data.get("home_score")
    away_score = data.get("away_score")

    if home_score is None or away_score is None:
        return jsonify({"error": "home_score and away_score are required"}), 400

    try:
        outcomes = SettlementService().record_result_and_score(
            game_id, home_score, away_score
        )
    except SQLAlchemyError as e:
        return scoring_failed(e)
    return outcomes_response(outcomes)


# Statistics


@bp.route("/users/<int:user_id>/stats")
def user_stats(user_id):
    """Season totals for a user"""
    get_user_or_404(user_id)
    competition = request.args.get("competition")
    return jsonify(
        stats_service.get_user_season_stats(user_id, competition=competition)
    )


@bp.route("/users/<int:user_id>/weeks/<week_id>/points")
def user_week_points(user_id, week_id):
    """Points a user earned in one week"""
    get_user_or_404(user_id)
    return jsonify(
        {
            "user_id": user_id,
            "week_id": week_id,
            "points": stats_service.get_user_week_points(user_id, week_id),
        }
    )


@bp.route("/users/<int:user_id>/performance")
def user_performance(user_id):
    """Weekly, spread-size, team and pick-pattern breakdown for a user"""
    get_user_or_404(user_id)
    return jsonify(
        {
            "weekly": stats_service.get_weekly_performance(user_id),
            "best_week": stats_service.get_best_week(user_id),
            "spread": stats_service.get_spread_performance(user_id),
            "teams": stats_service.get_team_performance(user_id),
            "patterns": stats_service.get_pick_patterns(user_id),
        }
    )


@bp.route("/leaderboard")
def leaderboard():
    """Leaderboard, optionally for one week or competition"""
    week_id = request.args.get("week_id")
    competition = request.args.get("competition")
    return jsonify(
        stats_service.get_leaderboard(week_id=week_id, competition=competition)
    )
