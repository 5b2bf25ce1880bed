from flask import request
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_socketio import SocketIO

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()
socketio = SocketIO()


def device_rate_key():
    """Rate-limit hardware per MAC so several readers behind one NAT don't share a bucket."""
    return request.headers.get('x-device-mac') or get_remote_address()


limiter = Limiter(key_func=get_remote_address)
