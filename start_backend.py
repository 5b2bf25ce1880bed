"""
Flask Backend Launcher
Starts the Socket.IO enabled backend for the RFID attendance system
"""
import os
import sys
from pathlib import Path

from dotenv import load_dotenv


def main():
    """Launch the Flask backend"""
    root_dir = Path(__file__).parent.absolute()
    load_dotenv(dotenv_path=root_dir / '.env')
    backend_dir = root_dir / 'backend'
    os.chdir(backend_dir)
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))
    host = os.environ.get('RFID_HOST', '127.0.0.1')
    port = int(os.environ.get('RFID_PORT', '5000'))

    from app import create_app
    from extensions import socketio

    app = create_app()
    socketio.run(app, host=host, port=port, debug=app.config['DEBUG'], allow_unsafe_werkzeug=True)


if __name__ == '__main__':
    main()
