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
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=flask_app.config.get('CORS_ORIGINS', []))

    # Import and register blueprints here
    from liao.main import main
    flask_app.register_blueprint(main)

    from liao.api.scores import scores
    # Mount scoring routes under /api to match frontend API client
    flask_app.register_blueprint(scores, url_prefix='/api')

    # Flask-Login session loader: the session is bound to the login code row
    from liao.models import LoginCode

    @login_manager.user_loader
    def load_login(login_id):
        return db.session.get(LoginCode, int(login_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'error': 'Login required'}), 401

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        from liao.models import Team, LoginCode
        with flask_app.app_context():
            db.drop_all()
            db.create_all()

            # Seed teams and the shared login code
            for name in flask_app.config.get('SEED_TEAMS', []):
                db.session.add(Team(name=name))
            login = LoginCode()
            login.set_code(flask_app.config['SEED_LOGIN_CODE'])
            db.session.add(login)

            db.session.commit()
            print('Database has been reset and seeded!')

    @click.command('add-team')
    @click.argument('name')
    def add_team_command(name):
        """Creates a team."""
        from liao.models import Team
        with flask_app.app_context():
            team = Team(name=name)
            db.session.add(team)
            db.session.commit()
            print(f'Team {team.name!r} created with id {team.id}')

    @click.command('add-login-code')
    @click.argument('code')
    def add_login_code_command(code):
        """Stores a hashed login code."""
        from liao.models import LoginCode
        length = int(flask_app.config.get('LOGIN_CODE_LENGTH', 7))
        if len(code) != length:
            raise click.BadParameter(f'login code must be exactly {length} characters')
        with flask_app.app_context():
            login = LoginCode()
            login.set_code(code)
            db.session.add(login)
            db.session.commit()
            print('Login code stored.')

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(add_team_command)
    flask_app.cli.add_command(add_login_code_command)

    return flask_app
