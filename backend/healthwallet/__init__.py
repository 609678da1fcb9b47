import os
import sqlite3
import logging
from flask import Flask, request, redirect, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_cors import CORS
from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

load_dotenv()

db = SQLAlchemy()
migrate = Migrate()

logger = logging.getLogger(__name__)


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


def create_app(config=None):
    app = Flask(__name__)
    config = config or {}

    is_production = os.getenv('FLASK_ENV') == 'production'

    secret_key = config.get('SECRET_KEY') or os.getenv('SECRET_KEY')
    if not secret_key:
        raise RuntimeError('SECRET_KEY environment variable is required')
    app.config['SECRET_KEY'] = secret_key

    jwt_secret = config.get('JWT_SECRET_KEY') or os.getenv('JWT_SECRET_KEY')
    if not jwt_secret:
        raise RuntimeError('JWT_SECRET_KEY environment variable is required')
    app.config['JWT_SECRET_KEY'] = jwt_secret
    app.config['JWT_ACCESS_TOKEN_EXPIRES'] = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', 3600))

    # Database configuration
    database_url = config.get('DATABASE_URL') or os.getenv('DATABASE_URL')
    if not database_url:
        raise RuntimeError('DATABASE_URL environment variable is required')

    if is_production and not database_url.startswith('postgresql'):
        raise RuntimeError(
            'PostgreSQL is required in production. '
            'DATABASE_URL must start with postgresql://'
        )

    app.config['SQLALCHEMY_DATABASE_URI'] = database_url
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    if not database_url.startswith('sqlite'):
        app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {
            'pool_pre_ping': True,
            'pool_recycle': 300,
        }

    # Upload size limit (10 MB by default)
    app.config['MAX_CONTENT_LENGTH'] = int(os.getenv('MAX_UPLOAD_MB', 10)) * 1024 * 1024

    # File storage
    app.config['FILE_STORE_BACKEND'] = os.getenv('FILE_STORE_BACKEND', 'local')
    app.config['UPLOAD_FOLDER'] = os.getenv(
        'UPLOAD_FOLDER', os.path.join(os.path.dirname(app.root_path), 'uploads')
    )
    app.config['S3_BUCKET_NAME'] = os.getenv('S3_BUCKET_NAME')
    app.config['AWS_REGION'] = os.getenv('AWS_REGION', 'us-east-1')

    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')

    # Explicit overrides (tests, scripts) win over the environment
    app.config.update(config)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    from healthwallet.storage import init_file_store
    init_file_store(app)

    # CORS restricted to configured origins
    allowed_origins = os.getenv('ALLOWED_ORIGINS', '')
    if allowed_origins:
        origins_list = [o.strip() for o in allowed_origins.split(',') if o.strip()]
    elif is_production:
        raise RuntimeError(
            'ALLOWED_ORIGINS environment variable is required in production'
        )
    else:
        # Development: allow localhost variants
        origins_list = [
            'http://localhost:*',
            'http://127.0.0.1:*',
        ]

    CORS(app, resources={r"/api/*": {"origins": origins_list}})

    # Redirect HTTP to HTTPS in production
    if is_production:
        @app.before_request
        def enforce_https():
            if not request.is_secure and request.headers.get('X-Forwarded-Proto', 'http') != 'https':
                url = request.url.replace('http://', 'https://', 1)
                return redirect(url, code=301)

    @app.after_request
    def add_security_headers(response):
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Referrer-Policy'] = 'no-referrer'
        if is_production or request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    # Bodies on POST/PUT must be JSON, or multipart for uploads
    @app.before_request
    def validate_content_type():
        if request.method in ('POST', 'PUT') and request.content_length:
            content_type = request.content_type or ''
            if 'application/json' not in content_type and 'multipart/form-data' not in content_type:
                return jsonify({'error': 'Content-Type must be application/json or multipart/form-data'}), 415

    from healthwallet.utils.logging import setup_logging
    setup_logging(app)

    register_error_handlers(app)

    # Register blueprints
    from healthwallet.routes.auth import auth_bp
    from healthwallet.routes.reports import reports_bp
    from healthwallet.routes.vitals import vitals_bp
    from healthwallet.routes.share import share_bp

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(reports_bp, url_prefix='/api/reports')
    app.register_blueprint(vitals_bp, url_prefix='/api/vitals')
    app.register_blueprint(share_bp, url_prefix='/api/share')

    @app.route('/api/health')
    def health():
        return {'status': 'OK', 'message': 'Health Wallet API is running'}, 200

    @app.cli.command('init-db')
    def init_db():
        """Create all tables directly (development only; use `flask db upgrade` otherwise)."""
        from healthwallet import models  # noqa: F401
        db.create_all()
        print('Database tables initialized.')

    @app.cli.command('cleanup-revoked-tokens')
    def cleanup_revoked_tokens():
        """Remove expired revoked token entries."""
        from healthwallet.models.revoked_token import RevokedToken
        count = RevokedToken.purge_expired()
        print(f'Removed {count} expired revoked token(s).')

    return app


def register_error_handlers(app):
    """Map service errors to JSON responses. This is the only place error kinds become status codes."""
    from healthwallet.errors import ServiceError

    @app.errorhandler(ServiceError)
    def handle_service_error(exc):
        if exc.status_code >= 500:
            logger.error('Service failure: %s', exc.message, exc_info=True)
            return jsonify({'error': 'Server error'}), exc.status_code
        return jsonify({'error': exc.message}), exc.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(exc):
        db.session.rollback()
        logger.error('Database error on %s %s', request.method, request.path, exc_info=True)
        return jsonify({'error': 'Server error'}), 500

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({'error': exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        logger.error('Unhandled error on %s %s', request.method, request.path, exc_info=True)
        return jsonify({'error': 'Server error'}), 500
