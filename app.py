import logging

from flask import Flask

from config import IS_TEST, APP_VERSION, PROFILE_STORE_BACKEND
from database import close_connection
from extensions import limiter

# Blueprints
from routes.schedules import schedules_bp
from routes.profiles import profiles_bp
from routes.storage_files import storage_files_bp

logger = logging.getLogger(__name__)

# Render payloads carry the whole schedule
MAX_CONTENT_LENGTH = 32 * 1024 * 1024


def create_app(test_config=None):
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = MAX_CONTENT_LENGTH
    app.config['RATELIMIT_ENABLED'] = not IS_TEST

    # Apply Test Config Overrides
    if test_config:
        app.config.update(test_config)

    # Setup Structured Logging
    from utils.logger import setup_logger
    setup_logger(app)

    # Health Check (validates DB connectivity when profiles live in Postgres)
    @app.route("/healthz")
    def healthz():
        if PROFILE_STORE_BACKEND != "postgres":
            return {"status": "ok", "db": "not configured", "version": APP_VERSION}, 200
        try:
            from database import get_db
            db = get_db()
            db.execute("SELECT 1").fetchone()
            return {"status": "ok", "db": "connected", "version": APP_VERSION}, 200
        except Exception as e:
            return {"status": "error", "db": str(e)}, 503

    # Simple ping endpoint for container health checks
    @app.route("/ping")
    def ping():
        return {"status": "ok"}, 200

    limiter.init_app(app)

    # Database Teardown
    app.teardown_appcontext(close_connection)

    app.register_blueprint(schedules_bp)
    app.register_blueprint(profiles_bp)
    app.register_blueprint(storage_files_bp)

    app.logger.info(f"[App] Schedule renderer {APP_VERSION} ready")
    return app


app = create_app()
