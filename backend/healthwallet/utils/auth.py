"""
Authentication utilities for JWT tokens.
"""
import secrets
import jwt
from datetime import datetime, timedelta
from functools import wraps
from flask import request, current_app, g

from healthwallet.errors import AuthError


def generate_token(user_id: int, email: str) -> str:
    """
    Generate a signed access token for a user.
    Lifetime comes from JWT_ACCESS_TOKEN_EXPIRES (seconds).
    """
    expires = current_app.config['JWT_ACCESS_TOKEN_EXPIRES']

    payload = {
        'user_id': user_id,
        'email': email,
        'jti': secrets.token_hex(16),  # Unique token ID
        'exp': datetime.utcnow() + timedelta(seconds=expires),
        'iat': datetime.utcnow()
    }

    return jwt.encode(payload, current_app.config['JWT_SECRET_KEY'], algorithm='HS256')


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Returns None when invalid or expired."""
    try:
        return jwt.decode(token, current_app.config['JWT_SECRET_KEY'], algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def authenticate(token: str) -> dict:
    """
    Resolve a bearer token to its claims.
    Raises AuthError if the token is invalid, revoked, or its user no longer exists.
    """
    payload = decode_token(token)
    if not payload:
        raise AuthError('Invalid or expired token')

    from healthwallet.models.revoked_token import RevokedToken
    if RevokedToken.is_revoked(payload.get('jti')):
        raise AuthError('Token has been revoked')

    from healthwallet import db
    from healthwallet.models.user import User
    if db.session.get(User, payload.get('user_id')) is None:
        raise AuthError('User no longer exists')

    return payload


def token_required(f):
    """Decorator to require a valid bearer token for a route."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        auth_header = request.headers.get('Authorization')
        if not auth_header:
            raise AuthError('Missing authorization header')

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            raise AuthError('Invalid authorization header format')

        payload = authenticate(parts[1])

        # Store user info in flask g object
        g.user_id = payload.get('user_id')
        g.user_email = payload.get('email')
        g.token_jti = payload.get('jti')
        g.token_exp = payload.get('exp')

        return f(*args, **kwargs)
    return wrapper
