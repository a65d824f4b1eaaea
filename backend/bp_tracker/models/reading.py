"""
Blood Pressure Reading model.
"""
import json
from datetime import datetime
from bp_tracker import db
from bp_tracker.utils.classification import CATEGORIES, classify
from bp_tracker.utils.time_utils import as_utc, format_display_date, format_display_time


class BloodPressureReading(db.Model):
    """
    Blood pressure reading model.
    Timestamps are stored as naive UTC. The category column is denormalized
    from systolic/diastolic and only ever written through update_category().
    """
    __tablename__ = 'bp_readings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    # Blood pressure values
    systolic = db.Column(db.Integer, nullable=False)
    diastolic = db.Column(db.Integer, nullable=False)
    pulse_rate = db.Column(db.Integer, nullable=True)
    category = db.Column(db.Enum(*CATEGORIES, name='bp_category'), nullable=False)

    # Timestamps
    timestamp = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Context supplied by the user
    comments = db.Column(db.String(500), nullable=True)
    location = db.Column(db.String(100), nullable=True)
    device_used = db.Column(db.String(100), nullable=True)
    _tags = db.Column('tags', db.Text, nullable=True)  # JSON array
    is_validated = db.Column(db.Boolean, default=False, nullable=False)

    __table_args__ = (
        db.Index('ix_bp_readings_user_timestamp', 'user_id', 'timestamp'),
        db.Index('ix_bp_readings_user_category', 'user_id', 'category'),
    )

    @property
    def tags(self) -> list:
        return json.loads(self._tags) if self._tags else []

    @tags.setter
    def tags(self, value):
        self._tags = json.dumps([t.strip() for t in value]) if value else None

    @property
    def bp_display(self) -> str:
        return f'{self.systolic}/{self.diastolic}'

    def update_category(self):
        """Recompute the category from the current pressure values."""
        self.category = classify(self.systolic, self.diastolic)
        return self

    @staticmethod
    def _isoformat(value):
        if not value:
            return None
        return as_utc(value).isoformat().replace('+00:00', 'Z')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'systolic': self.systolic,
            'diastolic': self.diastolic,
            'pulseRate': self.pulse_rate,
            'timestamp': self._isoformat(self.timestamp),
            'category': self.category,
            'comments': self.comments,
            'location': self.location,
            'deviceUsed': self.device_used,
            'isValidated': self.is_validated,
            'tags': self.tags,
            'createdAt': self._isoformat(self.created_at),
            'updatedAt': self._isoformat(self.updated_at),
            'bpDisplay': self.bp_display,
            'formattedDate': format_display_date(self.timestamp),
            'formattedTime': format_display_time(self.timestamp),
        }

    def __repr__(self):
        return f'<BloodPressureReading {self.id}: {self.systolic}/{self.diastolic}>'
