# mindquest/__init__.py
from flask import Flask
from sqlalchemy import event
from config import Config
from .extensions import db, migrate, login, limiter
from mindquest.models import User
# Import logging configuration
from .logging_config import setup_logging


def _enable_sqlite_savepoints(engine):
    """
    Let pysqlite emit BEGIN itself so SAVEPOINT works.

    Services insert unique rows inside begin_nested(); the stock driver
    manages transactions on its own and breaks nested ones.
    """
    @event.listens_for(engine, 'connect')
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, 'begin')
    def do_begin(conn):
        conn.exec_driver_sql('BEGIN')


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    # Setup logging (do this early, after config is loaded)
    setup_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login.init_app(app)
    limiter.init_app(app)

    with app.app_context():
        if db.engine.dialect.name == 'sqlite':
            _enable_sqlite_savepoints(db.engine)

    # Register API blueprint
    from mindquest.api import bp as api_bp
    app.register_blueprint(api_bp)

    # Register CLI commands
    from mindquest.cli import register_cli_commands
    register_cli_commands(app)

    # Register error handlers
    from mindquest.error_handlers import register_error_handlers
    register_error_handlers(app)

    # User loader callback
    @login.user_loader
    def load_user(user_id):
        # Ensure user_id is valid before querying
        try:
            uid = int(user_id)
        except (ValueError, TypeError):
            return None
        return db.session.get(User, uid)

    return app
