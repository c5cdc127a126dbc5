from datetime import datetime, timezone

from app import db


class Pick(db.Model):
    __tablename__ = "picks"

    id = db.Column(db.Integer, primary_key=True)

    # Pick identification
    pick_set_id = db.Column(db.Integer, db.ForeignKey("pick_sets.id"), nullable=False)
    game_id = db.Column(db.Integer, db.ForeignKey("games.id"), nullable=False)

    # Pick details (frozen at submission)
    choice = db.Column(db.String(10), nullable=False)  # "home" or "away"
    spread_at_pick = db.Column(db.Float)  # Home-relative, negative = home favored
    odds = db.Column(db.Integer)  # American odds, optional

    # Results (written by settlement only)
    status = db.Column(db.String(10), nullable=False, default="pending")
    result = db.Column(db.String(30))  # "<status>:<points>"
    points_earned = db.Column(db.Float, default=0.0)
    payout = db.Column(db.Float)
    scoring_method = db.Column(db.String(30))  # "spread" or "moneyline_fallback"
    explanation = db.Column(db.Text)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Constraints and indexes
    __table_args__ = (
        db.UniqueConstraint("pick_set_id", "game_id", name="unique_pick_set_game"),
        db.Index("idx_pick_game", "game_id"),
        db.Index("idx_pick_status", "status"),
    )

    def __repr__(self):
        return f"<Pick id={self.id} game_id={self.game_id} choice={self.choice} status={self.status}>"

    @property
    def week_id(self):
        """Get the week id from the owning pick set"""
        return self.pick_set.week_id if self.pick_set else None

    @property
    def user_id(self):
        return self.pick_set.user_id if self.pick_set else None

    def apply_outcome(self, outcome):
        """
        Write a settlement outcome onto this pick.

        Every field is assigned outright so that repeated settlement of the
        same game leaves the row unchanged.
        """
        self.status = outcome.status
        self.result = f"{outcome.status}:{outcome.points:g}"
        self.points_earned = float(outcome.points)
        self.payout = outcome.payout
        self.scoring_method = outcome.scoring_method
        self.explanation = outcome.explanation

    def to_dict(self):
        """Convert pick to dictionary for API responses"""
        return {
            "id": self.id,
            "pick_set_id": self.pick_set_id,
            "user_id": self.user_id,
            "week_id": self.week_id,
            "game_id": self.game_id,
            "choice": self.choice,
            "spread_at_pick": self.spread_at_pick,
            "odds": self.odds,
            "status": self.status,
            "result": self.result,
            "points_earned": self.points_earned,
            "payout": self.payout,
            "scoring_method": self.scoring_method,
            "explanation": self.explanation,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
