import logging
import os
import sys

from flask import Flask, jsonify, request
from sqlalchemy import text
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if BASE_DIR not in sys.path:
    sys.path.insert(0, BASE_DIR)

from config import Config
from exceptions import AttendanceError, UnauthorizedError
from extensions import db, limiter, login_manager, migrate, socketio
from utils.auth_tokens import load_user_from_request

logger = logging.getLogger(__name__)


def _configure_logging(app):
    logging.basicConfig(
        level=app.config.get('LOG_LEVEL', 'INFO'),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    logging.getLogger().setLevel(app.config.get('LOG_LEVEL', 'INFO'))


def _register_error_handlers(app):
    @app.errorhandler(AttendanceError)
    def handle_attendance_error(error):
        return jsonify({'error': error.to_dict()}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        kind = (error.name or 'HTTP_ERROR').upper().replace(' ', '_')
        body = {'status': error.code, 'kind': kind, 'message': error.description}
        return jsonify({'error': body}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception('Unhandled error on %s %s', request.method, request.path)
        body = {'status': 500, 'kind': 'INTERNAL', 'message': 'An unexpected error occurred.'}
        return jsonify({'error': body}), 500


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.secret_key = app.config['SECRET_KEY']
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)
    _configure_logging(app)

    @app.after_request
    def after_request(response):
        allowed_origins = app.config.get('CORS_ALLOWED_ORIGINS', [])
        request_origin = request.headers.get('Origin')
        if request_origin and request_origin in allowed_origins:
            response.headers['Access-Control-Allow-Origin'] = request_origin
            response.headers['Vary'] = 'Origin'
        response.headers.add('Access-Control-Allow-Headers', 'Content-Type,Authorization,x-device-mac,x-device-secret')
        response.headers.add('Access-Control-Allow-Methods', 'GET,POST,OPTIONS')
        return response

    db.init_app(app)
    migrate.init_app(app, db, directory=os.path.join(BASE_DIR, 'migrations'))

    login_manager.init_app(app)
    # Bearer tokens only; no cookie session to protect
    login_manager.session_protection = None
    login_manager.request_loader(load_user_from_request)

    @login_manager.unauthorized_handler
    def unauthorized():
        raise UnauthorizedError('Authentication required.')

    limiter.init_app(app)

    # Socket handlers attach to the shared SocketIO object on import
    import routes.realtime  # noqa: F401
    socketio.init_app(
        app,
        async_mode=app.config.get('SOCKETIO_ASYNC_MODE'),
        cors_allowed_origins=app.config.get('CORS_ALLOWED_ORIGINS'),
    )

    from routes.session import session_bp
    from routes.scan import scan_bp
    from routes.device import device_bp
    from routes.attendance import attendance_bp
    app.register_blueprint(session_bp)
    app.register_blueprint(scan_bp)
    app.register_blueprint(device_bp)
    app.register_blueprint(attendance_bp)

    _register_error_handlers(app)

    @app.route('/health', methods=['GET'])
    def health_check():
        try:
            db.session.execute(text('SELECT 1'))
        except Exception:
            logger.exception('Health check failed')
            db.session.rollback()
            return jsonify({'status': 'error', 'database': 'unreachable', 'version': app.config['VERSION']}), 500
        return jsonify({'status': 'ok', 'database': 'ok', 'version': app.config['VERSION']})

    @app.cli.command('create-tables')
    def create_tables():
        """Create every table directly, skipping migrations."""
        import models  # noqa: F401
        db.create_all()
        logger.info('Tables created for %s', app.config['SQLALCHEMY_DATABASE_URI'].split('@')[-1])

    return app


if __name__ == '__main__':
    app = create_app()
    socketio.run(app, debug=app.config['DEBUG'])
