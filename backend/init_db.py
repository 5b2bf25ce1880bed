import logging
import os

from flask_migrate import upgrade

from app import create_app

logger = logging.getLogger(__name__)


def init_database():
    """Apply every migration to the configured database."""
    app = create_app()
    with app.app_context():
        try:
            upgrade(directory=os.path.join(os.path.dirname(os.path.abspath(__file__)), 'migrations'))
            return True
        except Exception:
            logger.exception('Database migration failed')
            return False


def main():
    """Main function to initialize the database."""
    if not init_database():
        return 1
    logger.info('Database is up to date')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
