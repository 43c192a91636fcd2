from flask import Flask

from smrutimap.config import Config


def create_app(config_class=Config):
    """Application factory function"""
    app = Flask(__name__)
    app.config.from_object(config_class)

    from smrutimap.logging_config import init_logging
    init_logging(app)

    from smrutimap.db import init_db
    init_db(app)

    # Register blueprints
    from smrutimap.api import api_bp
    from smrutimap.routes import health_bp
    app.register_blueprint(api_bp)
    app.register_blueprint(health_bp)

    return app
