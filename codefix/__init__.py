# codefix/__init__.py
from dotenv import load_dotenv

# Config classes read the environment at import time, so .env goes first
load_dotenv()

from flask import Flask
from flask_cors import CORS
from .config import config_by_name


def create_app(config_name='default'):
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__)
    app.config.from_object(config_by_name[config_name])

    from .monitoring import configure_logging, register_request_logging
    configure_logging(app)
    register_request_logging(app)

    # Enable CORS
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    from .main import api_blueprint, register_error_handlers
    app.register_blueprint(api_blueprint, url_prefix='/api')
    register_error_handlers(app)

    @app.route("/health")
    def health_check():
        return {"status": "ok"}, 200

    return app
