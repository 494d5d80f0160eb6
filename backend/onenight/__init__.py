from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config

socketio = SocketIO(async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    allowed_origins = flask_app.config.get('CORS_ORIGINS', [])
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    # Initialize Socket.IO after app is created
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    from onenight.main import main
    flask_app.register_blueprint(main)

    from onenight.api.rooms import rooms
    flask_app.register_blueprint(rooms, url_prefix='/api/rooms')

    # One registry per app; socket handlers and HTTP routes reach it through
    # current_app.extensions
    from onenight.services.games import RoomRegistry
    from onenight.socketio_events import SocketIOTimer, SocketIOTransport, register_socketio_handlers

    namespace = flask_app.config.get('SOCKETIO_NAMESPACE', '/ws')
    testing = flask_app.config.get('TESTING', False)
    flask_app.extensions['onenight'] = RoomRegistry(
        transport=SocketIOTransport(socketio, namespace),
        timer=SocketIOTimer(socketio, inline=testing),
        idle_delay=(
            float(flask_app.config.get('NIGHT_IDLE_MIN_SEC', 3)),
            float(flask_app.config.get('NIGHT_IDLE_MAX_SEC', 7)),
        ),
    )
    register_socketio_handlers(namespace=namespace)
    flask_app.logger.info(f"[startup] socket namespace={namespace} testing={testing}")

    @click.command('roles')
    def roles_command():
        """Prints the role catalog in night order."""
        from onenight.services.games.roles import catalog_in_wake_order
        for info in catalog_in_wake_order():
            order = info.wake_order if info.wakes else '-'
            click.echo(f"{order:>2}  {info.name:<14} {info.team}")

    flask_app.cli.add_command(roles_command)

    return flask_app
