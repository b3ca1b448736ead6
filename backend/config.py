import os


def _origins(value):
    value = value.strip()
    if value == '*':
        return '*'
    return [o.strip() for o in value.split(',') if o.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///bingo.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    CORS_ORIGINS = _origins(os.environ.get('CORS_ORIGINS', '*'))
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/ws')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    # Data service backend: 'local' (SQLAlchemy) or 'ords' (remote REST service)
    DATA_SERVICE_BACKEND = os.environ.get('DATA_SERVICE_BACKEND', 'local')
    ORDS_BASE_URL = os.environ.get('ORDS_BASE_URL', 'http://localhost:8080/ords/bingo_schema')
    ORDS_AUTH_TYPE = os.environ.get('ORDS_AUTH_TYPE', '')
    ORDS_USERNAME = os.environ.get('ORDS_USERNAME', '')
    ORDS_PASSWORD = os.environ.get('ORDS_PASSWORD', '')
    # Upper bound for a single data service call (seconds)
    DATA_SERVICE_TIMEOUT_SEC = float(os.environ.get('DATA_SERVICE_TIMEOUT_SEC', '10'))
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    CARD_SIZE = int(os.environ.get('CARD_SIZE', '5'))


def server_options(environ=None):
    """Keyword arguments for ``socketio.run``; debug stays off unless FLASK_DEBUG=1."""
    environ = os.environ if environ is None else environ
    debug = environ.get('FLASK_DEBUG', '0') == '1'
    return {
        'host': environ.get('HOST', '0.0.0.0'),
        'port': int(environ.get('PORT', '3000')),
        'debug': debug,
        # The Werkzeug dev server is only allowed outside a terminal while debugging
        'allow_unsafe_werkzeug': debug,
    }
