#!/usr/bin/env python3
"""
Spread Pick'em Startup Script

Runs before the web process in a container:
- Waits for the database
- Creates tables
- Scores any completed games that finished while the service was down
"""

import os
import sys
import time

from sqlalchemy.exc import OperationalError

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

os.environ.setdefault("FLASK_CONFIG", "production")
# The web process owns the scheduler
os.environ.setdefault("SCHEDULER_ENABLED", "False")

from app import create_app, db  # noqa: E402
from app.services.settlement_service import SettlementService, summarize  # noqa: E402


def wait_for_db(app, max_retries=30):
    """Wait for database to be ready"""
    print("Waiting for database connection...")

    for i in range(max_retries):
        try:
            with app.app_context():
                db.session.execute(db.text("SELECT 1")).fetchone()
                print("Database connected!")
                return True
        except OperationalError as e:
            if i < max_retries - 1:
                print(f"Attempt {i+1}/{max_retries} failed, retrying in 2s...")
                print(f"   Error: {str(e)}")
                time.sleep(2)
            else:
                print(f"Database connection failed after {max_retries} attempts: {e}")
                return False
    return False


def score_missed_games(app):
    """Settle completed games that still have pending picks"""
    with app.app_context():
        outcomes = SettlementService().score_completed_games()
        if not outcomes:
            print("No completed games with pending picks")
            return

        summary = summarize(outcomes)
        print(
            f"Scored {summary['total']} picks on startup "
            f"({summary['errors']} could not be scored)"
        )


def main():
    print("=" * 60)
    print("Spread Pick'em - Startup")
    print("=" * 60)

    app = create_app()

    if not wait_for_db(app):
        sys.exit(1)

    with app.app_context():
        db.create_all()
        print("Database tables ready")

    score_missed_games(app)

    print("Startup complete")


if __name__ == "__main__":
    main()
