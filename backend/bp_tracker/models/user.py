"""
User model. Owns blood pressure readings; credentials are handled elsewhere.
"""
from datetime import datetime
from sqlalchemy.orm import validates
from bp_tracker import db


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    # Relationships
    readings = db.relationship('BloodPressureReading', backref='user', lazy='dynamic',
                               cascade='all, delete-orphan',
                               order_by='BloodPressureReading.timestamp.desc()')

    @validates('email')
    def normalize_email(self, key, email):
        return email.strip().lower() if email else email

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    @staticmethod
    def find_by_email(email: str):
        """Find a user by email (case-insensitive)."""
        return User.query.filter_by(email=email.strip().lower()).first()

    def __repr__(self):
        return f'<User {self.id}>'
