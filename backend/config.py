from dotenv import load_dotenv
import os

load_dotenv()


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_csv(name, default_csv):
    value = os.environ.get(name, default_csv)
    return [item.strip() for item in value.split(",") if item.strip()]


def _env_int(name, default):
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    return int(value)


def _database_uri():
    url = os.environ.get('DATABASE_URL')
    if url:
        return url
    user = os.environ.get('DB_USER', 'postgres')
    password = os.environ.get('DB_PASSWORD', 'password')
    host = os.environ.get('DB_HOST', 'localhost')
    port = os.environ.get('DB_PORT', '5432')
    name = os.environ.get('DB_NAME', 'rfid_attendance')
    return f'postgresql://{user}:{password}@{host}:{port}/{name}'


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'rfid-attendance-local-secret')

    # Database configuration
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens are minted by the auth service; we only verify them
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', 'rfid-attendance-local-jwt-secret')
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRY_HOURS = _env_int('JWT_EXPIRY_HOURS', 12)

    # Flask-Limiter storage; override with REDIS_URL for multi-process deployments
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL', 'memory://')
    RATELIMIT_ENABLED = _env_bool('RATELIMIT_ENABLED', True)
    RATELIMIT_HEADERS_ENABLED = True
    SCAN_RATE_LIMIT = os.environ.get('SCAN_RATE_LIMIT', '120 per minute')
    DEVICE_AUTH_RATE_LIMIT = os.environ.get('DEVICE_AUTH_RATE_LIMIT', '30 per minute')

    CORS_ALLOWED_ORIGINS = _env_csv(
        'CORS_ALLOWED_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173,http://localhost:3000'
    )

    # Attendance settings
    SESSION_START_GRACE_MINUTES = _env_int('SESSION_START_GRACE_MINUTES', 15)  # minutes before start / after end

    # Socket.IO; None lets Flask-SocketIO pick eventlet/gevent/threading
    SOCKETIO_ASYNC_MODE = os.environ.get('SOCKETIO_ASYNC_MODE') or None

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Application Settings
    VERSION = '1.0.0'
    DEBUG = _env_bool('FLASK_DEBUG', False)
    TESTING = False


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'
    SOCKETIO_ASYNC_MODE = 'threading'
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'
    SESSION_START_GRACE_MINUTES = 15
    LOG_LEVEL = 'WARNING'
