# Trackr_app/db_utils.py
"""
SQLite connection tuning, applied only when the configured database is SQLite
"""

from sqlalchemy import event

from .extensions import db

SQLITE_PRAGMAS = [
    "PRAGMA journal_mode=WAL",     # concurrent readers
    "PRAGMA synchronous=NORMAL",
    "PRAGMA temp_store=MEMORY",
    "PRAGMA busy_timeout=30000",
    "PRAGMA foreign_keys=ON",
]


def _apply_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    try:
        for pragma in SQLITE_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()


def setup_database_optimizations(app):
    """Register the PRAGMA listener on the app's engine"""
    if not app.config.get('SQLALCHEMY_DATABASE_URI', '').startswith('sqlite'):
        app.logger.info("Non-SQLite database detected, skipping SQLite optimizations")
        return

    with app.app_context():
        engine = db.engine
        if not event.contains(engine, 'connect', _apply_sqlite_pragmas):
            event.listen(engine, 'connect', _apply_sqlite_pragmas)

    app.logger.info("SQLite pragmas registered", extra={'pragmas': len(SQLITE_PRAGMAS)})
