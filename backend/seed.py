"""
Seed script to populate the database with a demo user and sample readings.
Run from backend/: python seed.py
"""
import sys
import os
from datetime import timedelta
sys.path.insert(0, os.path.dirname(__file__))

from bp_tracker import create_app, db
from bp_tracker.models import User, BloodPressureReading
from bp_tracker.utils.auth import generate_token
from bp_tracker.utils.time_utils import now_utc, to_naive_utc

DEMO_EMAIL = "demo@bp-tracker.local"

# (days ago, extra hours ago, systolic, diastolic, pulse)
SAMPLE_READINGS = [
    (13, 0, 118, 76, 68),
    (11, 0, 124, 78, 72),
    (9, 2, 131, 84, 75),
    (7, 0, 128, 79, None),
    (5, 1, 142, 91, 80),
    (3, 0, 119, 77, 70),
    (1, 3, 136, 86, 74),
]


def seed():
    app = create_app()
    with app.app_context():
        db.create_all()

        user = User.find_by_email(DEMO_EMAIL)
        if user:
            print(f"  Demo user already exists (id={user.id}), skipping readings.")
        else:
            user = User(name="Demo User", email=DEMO_EMAIL)
            db.session.add(user)
            db.session.flush()

            now = now_utc()
            for days_ago, hours_ago, systolic, diastolic, pulse in SAMPLE_READINGS:
                reading = BloodPressureReading(
                    user_id=user.id,
                    systolic=systolic,
                    diastolic=diastolic,
                    pulse_rate=pulse,
                    timestamp=to_naive_utc(now - timedelta(days=days_ago, hours=hours_ago)),
                    device_used="Demo cuff",
                )
                reading.update_category()
                db.session.add(reading)
            db.session.commit()
            print(f"  Created demo user (id={user.id}) with {len(SAMPLE_READINGS)} readings")

        print(f"\nAccess token:\n{generate_token(user.id, user.email)}")
        print("\nDone.")


if __name__ == "__main__":
    seed()
