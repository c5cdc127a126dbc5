"""
Spread Pick'em Settlement Service

Scores every pick attached to a game (or a week of games) and writes the
outcome back onto the pick rows. Settlement is a pure recomputation from the
final score and the pick's frozen spread, so the admin API, the scheduled
sweep and operator scripts can all call it for the same game and end up with
the same stored result.
"""

import logging
from collections import namedtuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from app import db
from app.models import Game, Pick
from app.utils.cache_utils import invalidate_model_cache
from app.utils.exceptions import GameNotFoundError, InvalidInputError, ScoringError
from app.utils.logging_config import ContextualLogger
from app.utils.scoring import (
    MONEYLINE_FALLBACK_METHOD,
    PENDING,
    STANDARD_WIN_POINTS,
    evaluate_pick,
    outcome_status,
    payout_for,
)

logger = logging.getLogger(__name__)

OutcomeRecord = namedtuple(
    "OutcomeRecord",
    [
        "pick_id",
        "game_id",
        "status",
        "points",
        "payout",
        "scoring_method",
        "explanation",
        "error",
    ],
)


def pending_outcome(pick, error=None):
    """Zero-point outcome for a pick that cannot be settled yet"""
    return OutcomeRecord(
        pick_id=pick.id,
        game_id=pick.game_id,
        status=PENDING,
        points=0,
        payout=None,
        scoring_method=None,
        explanation=None,
        error=error,
    )


def summarize(outcomes):
    """Count outcomes by status, plus failures"""
    summary = {"total": len(outcomes), "errors": 0}
    for outcome in outcomes:
        summary[outcome.status] = summary.get(outcome.status, 0) + 1
        if outcome.error:
            summary["errors"] += 1
    return summary


class SettlementService:
    """Scores picks for completed games and persists the results"""

    def __init__(self, win_points=None, allow_moneyline_fallback=None):
        self.win_points = win_points
        self.allow_moneyline_fallback = allow_moneyline_fallback

    def _win_points(self):
        if self.win_points is not None:
            return self.win_points
        return current_app.config.get("SCORING_WIN_POINTS", STANDARD_WIN_POINTS)

    def _fallback_enabled(self):
        if self.allow_moneyline_fallback is not None:
            return self.allow_moneyline_fallback
        return current_app.config.get("SCORING_MONEYLINE_FALLBACK", False)

    def score_game(self, game_id):
        """
        Score all picks for a game, whatever their current status.

        Picks on a game without a final score come back (and are stored) as
        pending with zero points. A pick that fails to score is logged and
        reported with its error; the rest of the batch still settles.

        Returns:
            list of OutcomeRecord, one per pick
        """
        game = db.session.get(Game, game_id)
        if game is None:
            raise GameNotFoundError(game_id)

        log = ContextualLogger(__name__, {"game_id": game.id, "week": game.week_id})
        picks = game.picks.order_by(Pick.id).all()

        if not picks:
            log.debug("No picks to score")
            return []

        outcomes = []
        try:
            if not game.has_final_score:
                for pick in picks:
                    outcome = pending_outcome(pick)
                    pick.apply_outcome(outcome)
                    outcomes.append(outcome)
                log.info(f"Game not final - {len(picks)} picks left pending")
            else:
                win_points = self._win_points()
                fallback = self._fallback_enabled()
                for pick in picks:
                    outcomes.append(
                        self._settle_pick(game, pick, win_points, fallback, log)
                    )

            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            log.error(f"Failed to persist settlement: {e}", exc_info=True)
            raise

        invalidate_model_cache("Pick")

        summary = summarize(outcomes)
        log.info(
            f"Scored {summary['total']} picks: "
            f"{summary.get('won', 0)} won, {summary.get('lost', 0)} lost, "
            f"{summary.get('pushed', 0)} pushed, {summary['errors']} failed"
        )
        return outcomes

    def _settle_pick(self, game, pick, win_points, fallback, log):
        try:
            evaluation = evaluate_pick(
                game.home_score,
                game.away_score,
                pick.spread_at_pick,
                pick.choice,
                win_points=win_points,
                allow_moneyline_fallback=fallback,
            )
            payout = payout_for(evaluation, pick.odds)
        except ScoringError as e:
            # A pick that cannot be scored goes back to pending for a later pass
            log.error(f"Failed to score pick {pick.id}: {e}")
            outcome = pending_outcome(pick, error=str(e))
            pick.apply_outcome(outcome)
            return outcome

        if evaluation.scoring_method == MONEYLINE_FALLBACK_METHOD:
            log.warning(f"Pick {pick.id} scored by moneyline fallback (no spread)")

        outcome = OutcomeRecord(
            pick_id=pick.id,
            game_id=game.id,
            status=outcome_status(evaluation),
            points=evaluation.points,
            payout=payout,
            scoring_method=evaluation.scoring_method,
            explanation=evaluation.explanation,
            error=None,
        )
        pick.apply_outcome(outcome)
        log.debug(f"Pick {pick.id}: {evaluation.explanation}")
        return outcome

    def score_week(self, week_id):
        """Score every game in a week, one commit per game"""
        games = (
            Game.query.filter_by(week_id=week_id)
            .order_by(Game.start_time, Game.id)
            .all()
        )

        outcomes = []
        for game in games:
            outcomes.extend(self.score_game(game.id))

        logger.info(
            f"Week {week_id}: scored {len(outcomes)} picks across {len(games)} games"
        )
        return outcomes

    def score_completed_games(self):
        """Score every final game that still has pending picks"""
        pending_game_ids = db.session.query(Pick.game_id).filter(
            Pick.status == PENDING
        )
        games = (
            Game.query.filter(
                Game.is_final.is_(True),
                Game.home_score.isnot(None),
                Game.away_score.isnot(None),
                Game.id.in_(pending_game_ids),
            )
            .order_by(Game.id)
            .all()
        )

        if not games:
            logger.debug("No completed games with pending picks")
            return []

        logger.info(f"Found {len(games)} completed games with pending picks")

        outcomes = []
        for game in games:
            outcomes.extend(self.score_game(game.id))
        return outcomes

    def recalculate_all(self):
        """Rescore every game that has picks"""
        game_ids = [
            game_id
            for (game_id,) in db.session.query(Pick.game_id)
            .distinct()
            .order_by(Pick.game_id)
            .all()
        ]

        logger.info(f"Recalculating {len(game_ids)} games")

        outcomes = []
        for game_id in game_ids:
            outcomes.extend(self.score_game(game_id))
        return outcomes

    def record_result_and_score(self, game_id, home_score, away_score):
        """Record a final score for a game, then settle its picks"""
        if home_score is None or away_score is None:
            raise InvalidInputError("home_score and away_score are required")

        game = db.session.get(Game, game_id)
        if game is None:
            raise GameNotFoundError(game_id)

        try:
            game.record_final_score(home_score, away_score)
            db.session.commit()
        except (TypeError, ValueError) as e:
            db.session.rollback()
            raise InvalidInputError(f"Invalid final score: {e}") from e

        logger.info(
            f"Game {game.id} final: {game.away_team} {game.away_score} @ "
            f"{game.home_team} {game.home_score}"
        )
        return self.score_game(game.id)
