import logging
from onenight import create_app, socketio

logging.basicConfig(level=logging.INFO)

app = create_app()
 
if __name__ == '__main__':
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True)
