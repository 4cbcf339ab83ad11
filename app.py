"""
Flask backend for the Scale Linking Report
Serves the score converter and the built report
With Google OAuth 2.0 authentication
"""

from flask import Flask
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix
import logging
import os

from config import (
    SECRET_KEY, ALLOWED_ORIGINS, GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET,
    SCORE_DATA_SOURCE, SCORE_CSV_PATH,
)
from extensions import oauth
from converter import ConverterRegistry
from scores import DatasetError, load_assessment_datasets

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def load_registry(source=SCORE_DATA_SOURCE, csv_path=SCORE_CSV_PATH):
    """Fit converters from the configured score source; empty on failure."""
    try:
        datasets = load_assessment_datasets(source, csv_path)
    except DatasetError as e:
        logger.error(f"Failed to load score data: {e}")
        return ConverterRegistry({})

    registry = ConverterRegistry.from_datasets(datasets)
    logger.info(f"Score converters ready for {len(registry)} assessments")
    return registry


def create_app(registry=None):
    """
    Build the Flask app.
    registry is the ConverterRegistry the conversion API dispatches to; when
    omitted it is fitted from the configured score source.
    """
    app = Flask(__name__)

    # Fix for running behind Cloud Run proxy (ensures HTTPS redirect URIs)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    # Session configuration
    app.secret_key = SECRET_KEY
    app.config['SESSION_COOKIE_SECURE'] = os.environ.get('FLASK_ENV') != 'development'
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'

    CORS(app, origins=ALLOWED_ORIGINS, supports_credentials=True)

    oauth.init_app(app)
    oauth.register(
        name='google',
        client_id=GOOGLE_CLIENT_ID,
        client_secret=GOOGLE_CLIENT_SECRET,
        server_metadata_url='https://accounts.google.com/.well-known/openid-configuration',
        client_kwargs={
            'scope': 'openid email profile'
        }
    )

    if registry is None:
        registry = load_registry()
    app.extensions['score_converters'] = registry

    from blueprints.auth_routes import bp as auth_bp
    from blueprints.converter import bp as converter_bp
    from blueprints.report import bp as report_bp
    from blueprints.health import bp as health_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(converter_bp)
    app.register_blueprint(report_bp)
    app.register_blueprint(health_bp)

    return app


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8080))
    create_app().run(host='0.0.0.0', port=port, debug=os.environ.get('FLASK_ENV') == 'development')
