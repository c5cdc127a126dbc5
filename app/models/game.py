from datetime import datetime, timezone

from app import db


def parse_score(value, side):
    """Turn a submitted score into a non-negative whole number"""
    if isinstance(value, bool):
        raise ValueError(f"{side} score must be a number, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{side} score must be a whole number, got {value!r}")
        value = int(value)
    elif not isinstance(value, int):
        value = int(str(value).strip())

    if value < 0:
        raise ValueError(f"{side} score cannot be negative, got {value}")
    return value


class Game(db.Model):
    __tablename__ = "games"

    id = db.Column(db.Integer, primary_key=True)

    # Game identification
    week_id = db.Column(db.String(20), nullable=False)  # e.g. "2025-W03"
    competition = db.Column(db.String(30), nullable=False, default="nfl")

    # Teams
    home_team = db.Column(db.String(100), nullable=False)
    away_team = db.Column(db.String(100), nullable=False)

    # Game timing
    start_time = db.Column(db.DateTime)

    # Scores (only meaningful once is_final is set)
    home_score = db.Column(db.Integer)
    away_score = db.Column(db.Integer)

    # Game status
    is_final = db.Column(db.Boolean, default=False, nullable=False)

    # Timestamps
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    picks = db.relationship(
        "Pick", backref="game", lazy="dynamic", cascade="all, delete-orphan"
    )

    # Indexes
    __table_args__ = (
        db.Index("idx_game_week", "week_id"),
        db.Index("idx_game_final", "is_final"),
        db.CheckConstraint("home_team != away_team", name="different_teams"),
    )

    def __repr__(self):
        return f"<Game {self.away_team} @ {self.home_team} {self.week_id}>"

    @property
    def has_final_score(self):
        """True when the game is final and both scores are recorded"""
        return (
            bool(self.is_final)
            and self.home_score is not None
            and self.away_score is not None
        )

    @property
    def margin(self):
        """Home margin (None until the final score is in)"""
        if not self.has_final_score:
            return None
        return self.home_score - self.away_score

    @property
    def status(self):
        """Get game status as string"""
        return "completed" if self.has_final_score else "scheduled"

    def record_final_score(self, home_score, away_score):
        """Set both scores and mark the game final in one step"""
        if home_score is None or away_score is None:
            raise ValueError("Both home_score and away_score are required")

        home_score = parse_score(home_score, "Home")
        away_score = parse_score(away_score, "Away")

        self.home_score = home_score
        self.away_score = away_score
        self.is_final = True

    def get_pending_picks_count(self):
        """Count picks still waiting for a result"""
        return self.picks.filter_by(status="pending").count()

    def to_dict(self):
        """Convert game to dictionary for API responses"""
        return {
            "id": self.id,
            "week_id": self.week_id,
            "competition": self.competition,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "is_final": self.is_final,
            "status": self.status,
        }
