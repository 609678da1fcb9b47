"""
Development server. Production runs the app factory under a WSGI server,
e.g. ``gunicorn 'healthwallet:create_app()'``.
"""
import os
from healthwallet import create_app

app = create_app()


def _ssl_context():
    cert_path = os.getenv('SSL_CERT_PATH')
    key_path = os.getenv('SSL_KEY_PATH')
    if cert_path and key_path:
        return cert_path, key_path
    return None


if __name__ == '__main__':
    app.run(
        host=os.getenv('HOST', '127.0.0.1'),
        port=int(os.getenv('PORT', 5000)),
        debug=os.getenv('FLASK_ENV') != 'production',
        ssl_context=_ssl_context(),
    )
