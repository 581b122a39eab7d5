from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5174",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Models must be imported before create_all/migrations see the metadata
    from simon import models  # noqa: F401

    from simon.main import main
    flask_app.register_blueprint(main)

    from simon.api.game import game
    flask_app.register_blueprint(game, url_prefix='/api/game')

    # Engine wiring: one engine per app, built on first use
    from simon.presenter import SocketIOPresenter
    from simon.services.game import ENGINE_FACTORY_KEY, ManualScheduler, SocketIOScheduler, build_engine

    presenter = SocketIOPresenter(
        socketio,
        sound_enabled=bool(flask_app.config.get('SOUND_ENABLED', True)),
        logger=flask_app.logger,
    )
    if flask_app.config.get('TESTING'):
        # Tests decide when timers fire
        scheduler = ManualScheduler()
    else:
        scheduler = SocketIOScheduler(
            socketio,
            app=flask_app,
            heartbeat_sec=int(flask_app.config.get('TIMER_HEARTBEAT_SEC', 0)),
        )
    flask_app.extensions[ENGINE_FACTORY_KEY] = lambda: build_engine(flask_app, presenter, scheduler)

    try:
        from simon.socketio_events import register_socketio_handlers
        register_socketio_handlers(testing=flask_app.config.get('TESTING', False))
    except Exception as exc:
        flask_app.logger.warning(f"SocketIO events not loaded: {exc}")

    @click.command('stats-show')
    def stats_show_command():
        """Print the persisted statistics."""
        from simon.services.game import SqlStatsStore, Statistics
        store = SqlStatsStore(flask_app, key=flask_app.config.get('STATS_KEY', 'simonGameStats'))
        stats = store.load() or Statistics()
        for key, value in stats.to_dict().items():
            click.echo(f"{key}: {value}")

    @click.command('stats-reset')
    @click.option('--yes', is_flag=True, help='Do not ask for confirmation.')
    def stats_reset_command(yes):
        """Drops the persisted statistics slot."""
        from simon.services.game import SqlStatsStore
        if not yes and not click.confirm('Erase all saved statistics?'):
            return
        store = SqlStatsStore(flask_app, key=flask_app.config.get('STATS_KEY', 'simonGameStats'))
        with flask_app.app_context():
            db.create_all()
        store.clear()
        click.echo('Statistics have been reset!')

    flask_app.cli.add_command(stats_show_command)
    flask_app.cli.add_command(stats_reset_command)

    return flask_app
