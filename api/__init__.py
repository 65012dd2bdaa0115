# api/__init__.py

import os
import logging
from flask import Flask
from flask_cors import CORS


def create_app(test_config=None):
    """
    Application factory: builds the JSON API around the cable sizing engine.
    """
    app = Flask(__name__)

    # Comma separated list, e.g. "https://calc.example.com,https://staging.example.com"
    allowed_origins_str = os.environ.get('ALLOWED_ORIGINS')

    if allowed_origins_str:
        origins = [origin.strip() for origin in allowed_origins_str.split(',')]
    else:
        origins = "*"
        app.logger.warning("ALLOWED_ORIGINS is not set. CORS allows every origin. DO NOT USE IN PRODUCTION.")

    CORS(
        app,
        resources={r"/api/*": {"origins": origins}},
        methods=["GET", "POST", "OPTIONS"],
        allow_headers="*",
    )

    app.config.from_mapping(
        SECRET_KEY=os.environ.get('SECRET_KEY', 'dev'),
        ENVIRONMENT=os.environ.get('ENVIRONMENT', 'development'),
    )
    if test_config:
        app.config.from_mapping(test_config)

    logging.basicConfig(level=logging.INFO, format='[%(asctime)s] [%(levelname)s] %(message)s')

    with app.app_context():
        from .routes import bp as calculator_bp, register_error_handlers

        app.register_blueprint(calculator_bp, url_prefix='/api')
        register_error_handlers(app)

        logging.info("Cable calculator API created (environment: %s).", app.config['ENVIRONMENT'])

    return app
