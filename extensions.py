#=======================================================================================================
# Extensions for the Conomy Flask Application
#=======================================================================================================
from flask import jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate


db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()


@login_manager.unauthorized_handler
def unauthorized():
    # JSON API: no login page to redirect to
    return jsonify({"error": "Unauthorized"}), 401


def init_extensions(app):
    """Initialize Flask extensions; schema changes go through `flask db migrate`"""
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    login_manager.session_protection = "basic"

    return app
