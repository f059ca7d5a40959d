"""
Test values fixtures for sink tests.

Provides the option set and log records shared by the unit tests.
"""
import pytest


@pytest.fixture
def sink_options():
    """Return the minimal set of valid construction options"""
    return {
        'server': 'localhost',
        'user': 'sa',
        'password': 'secret',
        'database': 'logs',
        'table': 'winston_logs',
    }


@pytest.fixture
def log_record():
    """Return a log record with metadata of every literal class"""
    return {
        'level': 'info',
        'message': "User 'bob' logged in",
        'user_id': 42,
        'ratio': 0.5,
        'session': None,
        'tags': ['web', "o'clock"],
        'context': {'ip': '10.0.0.1'},
    }
