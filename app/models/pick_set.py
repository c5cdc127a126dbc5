from datetime import datetime, timezone

from app import db


class PickSet(db.Model):
    """A user's picks for one week"""

    __tablename__ = "pick_sets"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    week_id = db.Column(db.String(20), nullable=False)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    picks = db.relationship(
        "Pick", backref="pick_set", lazy="dynamic", cascade="all, delete-orphan"
    )

    __table_args__ = (
        db.UniqueConstraint("user_id", "week_id", name="unique_user_week_pick_set"),
        db.Index("idx_pick_set_user", "user_id"),
    )

    def __repr__(self):
        return f"<PickSet user_id={self.user_id} week={self.week_id}>"

    @staticmethod
    def get_or_create(user_id, week_id):
        """Fetch the user's pick set for a week, creating it if needed"""
        pick_set = PickSet.query.filter_by(user_id=user_id, week_id=week_id).first()
        if pick_set is None:
            pick_set = PickSet(user_id=user_id, week_id=week_id)
            db.session.add(pick_set)
            db.session.flush()
        return pick_set
