"""
Authentication utilities for JWT tokens.
"""
import os
import secrets
import jwt
from datetime import datetime, timedelta, timezone
from functools import wraps
from flask import request, jsonify, g, current_app


def _jwt_secret() -> str:
    secret = current_app.config.get('JWT_SECRET_KEY') or os.getenv('JWT_SECRET_KEY')
    if not secret:
        raise RuntimeError('JWT_SECRET_KEY environment variable is required')
    return secret


def generate_token(user_id: int, email: str) -> str:
    """
    Generate an access token for a user.
    Expiry comes from JWT_ACCESS_TOKEN_EXPIRES (seconds, default 1 hour).
    """
    expires = int(current_app.config.get('JWT_ACCESS_TOKEN_EXPIRES', 3600))
    now = datetime.now(timezone.utc)

    payload = {
        'user_id': user_id,
        'email': email,
        'jti': secrets.token_hex(16),  # Unique token ID
        'exp': now + timedelta(seconds=expires),
        'iat': now,
    }

    return jwt.encode(payload, _jwt_secret(), algorithm='HS256')


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Returns None if invalid or expired."""
    try:
        return jwt.decode(token, _jwt_secret(), algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def token_required(f):
    """Decorator to require valid JWT token for a route.

    Also checks that the user account still exists and is active.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        auth_header = request.headers.get('Authorization')
        if not auth_header:
            return jsonify({'success': False, 'message': 'Missing authorization header'}), 401

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return jsonify({'success': False, 'message': 'Invalid authorization header format'}), 401

        payload = decode_token(parts[1])
        if not payload:
            return jsonify({'success': False, 'message': 'Invalid or expired token'}), 401

        from bp_tracker import db
        from bp_tracker.models.user import User
        user = db.session.get(User, payload.get('user_id'))
        if not user or not user.is_active:
            return jsonify({'success': False, 'message': 'Account is deactivated'}), 401

        # Store user info in flask g object
        g.user_id = user.id
        g.user_email = payload.get('email')
        g.token_jti = payload.get('jti')

        return f(*args, **kwargs)
    return wrapper
