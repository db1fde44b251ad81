from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager
from flask_cors import CORS
from flask_migrate import Migrate
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()
migrate = Migrate()


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    login_manager.init_app(flask_app)
    # Player sessions come from the player_session cookie, not Flask's session
    login_manager.session_protection = None
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=flask_app.config.get('CORS_ORIGINS', []))

    # Import and register blueprints here
    from portal.routes import main
    flask_app.register_blueprint(main)

    from portal.api.verification import verification
    flask_app.register_blueprint(verification)
    # The website calls the same endpoints under /api
    flask_app.register_blueprint(verification, url_prefix='/api', name='api')

    from portal.services.identity.provider import LocalIdentityProvider
    flask_app.extensions['identity_provider'] = LocalIdentityProvider(db)

    from portal.auth import load_player_session, reject_unauthenticated
    login_manager.request_loader(load_player_session)
    login_manager.unauthorized_handler(reject_unauthenticated)

    from portal.errors import PortalError

    @flask_app.errorhandler(PortalError)
    def handle_portal_error(exc):
        if exc.status_code >= 500:
            flask_app.logger.error(f"[error] {type(exc).__name__}: {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database tables."""
        import portal.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('purge-sessions')
    def purge_sessions_command():
        """Deletes expired player sessions."""
        from portal.services.verification.sessions import purge_expired_sessions
        with flask_app.app_context():
            removed = purge_expired_sessions(db.session)
            click.echo(f'Removed {removed} expired sessions.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(purge_sessions_command)

    return flask_app
