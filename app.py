import os
import logging
import click
from flask import Flask
from config import Config
from extensions import db, login_manager, init_extensions
from logger import build_file_handler, LOG_FORMAT



def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    if not app.debug and not app.testing:
        app.config.update(
            SESSION_COOKIE_SECURE=True,
            SESSION_COOKIE_HTTPONLY=True,
            REMEMBER_COOKIE_SECURE=True,
            REMEMBER_COOKIE_HTTPONLY=True,
        )

    setup_logging(app)

    # --------------------------------------------------------------------------------------------------------------------------
    # DATABASE: sqlite fallback needs its instance directory
    # ----------------------------------------------------------------------------------------------------------------------------
    database_uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if database_uri.startswith("sqlite:///"):
        os.makedirs(os.path.dirname(database_uri.replace("sqlite:///", "", 1)) or ".", exist_ok=True)

    init_extensions(app)
    register_blueprints(app)
    register_commands(app)

    # ------------------------------------------------------------------------------------------------------------------------
    # Flask-Login user_loader - inside create_app to avoid circular imports
    # ------------------------------------------------------------------------------------------------------------------------
    @login_manager.user_loader
    def load_user(user_id):
        from models import User
        return db.session.get(User, user_id)

    @app.route("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    app.logger.info(f"Conomy app created ({app.config.get('FLASK_ENV')})")
    return app


def setup_logging(app):
    """File log for the app, console too when debugging"""
    app.logger.handlers.clear()
    app.logger.setLevel(logging.INFO)
    app.logger.propagate = False  # Prevent duplicate logs

    if not app.testing:
        app.logger.addHandler(build_file_handler(os.path.join("logs", "app.log")))

    if app.debug or app.testing:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        app.logger.addHandler(console_handler)


def register_blueprints(app):
    from blueprints.auth import bp as auth_bp
    from blueprints.profile import bp as profile_bp
    from blueprints.payments import bp as payment_bp
    from blueprints.products import bp as products_bp
    from activity import activity_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(payment_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(activity_bp)


def register_commands(app):

    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        import models  # noqa: F401
        db.create_all()
        click.echo("Database tables created")

    @app.cli.command("seed-products")
    def seed_products():
        """Insert the default investment products."""
        from ledger.products import ProductCatalog
        added = ProductCatalog().seed_default_products()
        click.echo(f"Added {added} products")


# ----------------------
# Local development
# ----------------------
if __name__ == "__main__":
    app = create_app()
    port = int(os.environ.get("PORT", 5000))
    app.run(debug=app.config.get("DEBUG", False), host="0.0.0.0", port=port)

#=======================================================================================================
#------------------------THE END OF APP----------------------------------------------------------------
#==========================================================================================================
