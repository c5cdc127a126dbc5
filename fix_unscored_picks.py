"""
Score picks that are still pending on games that are already final.

Safe to run any time: settlement is a recomputation, so picks that were
already scored keep the same result.
"""

from app import create_app
from app.models import Game, Pick
from app.services.settlement_service import SettlementService, summarize


def fix_unscored_picks():
    """Find and score all pending picks on final games"""

    app = create_app()

    with app.app_context():
        print("=" * 60)
        print("Scoring Pending Picks for Final Games")
        print("=" * 60)

        pending = (
            Pick.query.join(Game)
            .filter(Game.is_final.is_(True), Pick.status == "pending")
            .count()
        )

        if not pending:
            print("No pending picks on final games - nothing to fix")
            return

        print(f"\nFound {pending} pending picks on final games")

        outcomes = SettlementService().score_completed_games()
        summary = summarize(outcomes)

        for outcome in outcomes:
            if outcome.error:
                print(f"  [WARN] Pick {outcome.pick_id} (game {outcome.game_id}): {outcome.error}")

        print(f"\n{'=' * 60}")
        print(
            f"Scored {summary['total']} picks: {summary.get('won', 0)} won, "
            f"{summary.get('lost', 0)} lost, {summary.get('pushed', 0)} pushed"
        )
        print(f"{'=' * 60}")

        remaining = (
            Pick.query.join(Game)
            .filter(Game.is_final.is_(True), Pick.status == "pending")
            .count()
        )

        if remaining == 0:
            print("\n[OK] All picks for final games are now scored!")
        else:
            print(f"\n[WARN] {remaining} picks still pending - check settlement.log")


if __name__ == "__main__":
    fix_unscored_picks()
