import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Comma-separated list of browser origins allowed to open a socket
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000',
        ).split(',') if o.strip()
    ]
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    # Bounds (seconds) of the fake wait used for a night turn nobody holds
    NIGHT_IDLE_MIN_SEC = float(os.environ.get('NIGHT_IDLE_MIN_SEC', '3'))
    NIGHT_IDLE_MAX_SEC = float(os.environ.get('NIGHT_IDLE_MAX_SEC', '7'))
