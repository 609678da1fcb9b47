"""
Account routes: registration, login, logout and the current user.
"""
from flask import Blueprint, jsonify, g
from healthwallet import db
from healthwallet.errors import ValidationError, ConflictError, AuthError, NotFoundError
from healthwallet.models import User, RevokedToken
from healthwallet.routes import json_object
from healthwallet.utils.auth import generate_token, token_required
from healthwallet.utils.logging import get_logger
from healthwallet.utils.validators import validate_registration

auth_bp = Blueprint('auth', __name__)

log = get_logger(__name__)


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an account and return a token for it."""
    data = json_object(required=True)

    errors = validate_registration(data)
    if errors:
        raise ValidationError(errors)

    email = data['email'].strip()
    if User.find_by_email(email):
        raise ConflictError('A user with this email already exists')

    user = User(email=email, name=data['name'].strip())
    user.set_password(data['password'])
    db.session.add(user)
    db.session.commit()

    log.info('user_registered', user_id=user.id)

    return jsonify({
        'message': 'User registered successfully',
        'token': generate_token(user.id, user.email),
        'user': user.to_dict(),
    }), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = json_object()
    email, password = data.get('email'), data.get('password')
    if not isinstance(email, str) or not isinstance(password, str) or not email.strip() or not password:
        raise ValidationError('Email and password are required')

    user = User.find_by_email(email.strip())
    if not user or not user.check_password(password):
        log.info('login_failed')
        raise AuthError('Invalid credentials')

    log.info('login', user_id=user.id)

    return jsonify({
        'token': generate_token(user.id, user.email),
        'user': user.to_dict(),
    }), 200


@auth_bp.route('/me', methods=['GET'])
@token_required
def me():
    user = db.session.get(User, g.user_id)
    if not user:
        raise NotFoundError('User not found')
    return jsonify({'user': user.to_dict()}), 200


@auth_bp.route('/logout', methods=['POST'])
@token_required
def logout():
    """Revoke the bearer token used for this request."""
    RevokedToken.revoke(g.token_jti, g.user_id, g.token_exp)
    log.info('logout', user_id=g.user_id)
    return jsonify({'message': 'Successfully logged out'}), 200
