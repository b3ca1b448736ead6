from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    cors_origins = flask_app.config.get('CORS_ORIGINS', '*')
    CORS(flask_app, resources={r"/api/*": {"origins": cors_origins}})

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=cors_origins)

    # Registry and gateway live for the lifetime of this app instance
    from bingo.actions import GameActions
    from bingo.gateway import RealtimeGateway
    from bingo.registry import RoomRegistry
    from bingo.services import build_data_service

    registry = RoomRegistry()
    gateway = RealtimeGateway(socketio, registry, namespace=flask_app.config.get('SOCKETIO_NAMESPACE', '/ws'))
    room_code_length = int(flask_app.config.get('ROOM_CODE_LENGTH', 6))
    flask_app.extensions['bingo_actions'] = GameActions(
        build_data_service(flask_app), registry, gateway, room_code_length=room_code_length,
    )

    from bingo.main import main
    flask_app.register_blueprint(main)

    from bingo.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api')

    from bingo.socketio_events import register_socketio_handlers
    register_socketio_handlers(gateway, room_code_length=room_code_length)

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the airline pool."""
        from bingo.models import seed_airlines
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            added = seed_airlines()
            print(f'Database has been reset and seeded with {added} airlines!')

    flask_app.cli.add_command(db_reset_command)

    return flask_app
