"""
Fixtures for SQLite-specific integration tests.
"""
import datetime

import pytest
import sqlalchemy as sa


@pytest.fixture
def seeded_logs(sqlite_db):
    """Insert rows with fixed timestamps, one per January week of 2024"""
    path, engine = sqlite_db
    rows = [
        ('info', 'first', '{}', datetime.datetime(2024, 1, 1, 9, 0)),
        ('warn', 'second', '{}', datetime.datetime(2024, 1, 8, 9, 0)),
        ('error', 'third', '{"code": 500}', datetime.datetime(2024, 1, 15, 9, 0)),
        ('info', 'fourth', '{}', datetime.datetime(2024, 1, 22, 9, 0)),
    ]
    with engine.begin() as conn:
        for level, message, meta, timestamp in rows:
            conn.execute(
                sa.text('INSERT INTO logs (level, message, meta, timestamp) '
                        'VALUES (:level, :message, :meta, :timestamp)'),
                {'level': level, 'message': message, 'meta': meta,
                 'timestamp': timestamp.strftime('%Y-%m-%d %H:%M:%S')})
    return path, engine
