import logging
from unittest.mock import MagicMock

import pytest
import sqlalchemy as sa
from logsink.connection import ConnectionManager
from logsink.options import SinkOptions
from logsink.sql import Statement


@pytest.fixture
def options(sink_options):
    return SinkOptions(**sink_options)


def test_engine_created_once_with_pool_settings(options, mock_engine_factory):
    factory = mock_engine_factory()
    manager = ConnectionManager(options, engine_factory=factory)

    assert manager.engine is factory.engine
    assert len(factory.calls) == 1
    url, kwargs = factory.calls[0]
    assert url.drivername == 'mssql+pyodbc'
    assert kwargs['pool_size'] == 10
    assert kwargs['pool_recycle'] == 30
    assert kwargs['echo'] is False


def test_construction_does_not_connect(options, mock_engine_factory):
    factory = mock_engine_factory()
    ConnectionManager(options, engine_factory=factory)
    factory.engine.connect.assert_not_called()


def test_connect_success(options, mock_engine_factory):
    factory = mock_engine_factory()
    manager = ConnectionManager(options, engine_factory=factory)

    assert manager.connect() is True
    assert manager.connected is True
    factory.engine.connect.return_value.close.assert_called_once()


def test_connect_warms_minimum_connections(sink_options, mock_engine_factory):
    factory = mock_engine_factory()
    options = SinkOptions(**sink_options, pool_min_connections=3)
    manager = ConnectionManager(options, engine_factory=factory)

    manager.connect()
    assert factory.engine.connect.call_count == 3


def test_connect_failure_releases_opened_connections(sink_options, mock_engine_factory):
    factory = mock_engine_factory()
    options = SinkOptions(**sink_options, pool_min_connections=2)
    manager = ConnectionManager(options, engine_factory=factory)
    first = MagicMock(name='first')
    factory.engine.connect.side_effect = [
        first, sa.exc.OperationalError('connect', {}, Exception('server not found'))]

    assert manager.connect() is False
    first.close.assert_called_once()


def test_connect_failure_is_not_raised(options, mock_engine_factory, caplog):
    """Connection failures are logged at debug level when console is off"""
    factory = mock_engine_factory(connect_fail=True)
    manager = ConnectionManager(options, engine_factory=factory)

    with caplog.at_level(logging.DEBUG, logger='logsink'):
        assert manager.connect() is False

    assert manager.connected is False
    messages = [r for r in caplog.records if "Couldn't connect" in r.getMessage()]
    assert messages
    assert messages[0].levelno == logging.DEBUG


def test_connect_failure_console(sink_options, mock_engine_factory, caplog):
    """With the console flag the failure is an error"""
    factory = mock_engine_factory(connect_fail=True)
    manager = ConnectionManager(SinkOptions(**sink_options, console=True), engine_factory=factory)

    with caplog.at_level(logging.DEBUG, logger='logsink'):
        manager.connect()

    errors = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert errors
    assert 'server not found' in errors[0].getMessage()


def test_execute_without_rows(options, mock_engine_factory):
    factory = mock_engine_factory()
    manager = ConnectionManager(options, engine_factory=factory)
    statement = Statement('INSERT INTO [t] ([a]) VALUES (:v0);', {'v0': 1})

    assert manager.execute(statement) is None

    args, _ = factory.connection.execute.call_args
    assert str(args[0]) == statement.sql
    assert args[1] == {'v0': 1}
    assert manager.calls == 1


def test_execute_with_rows(options, mock_engine_factory):
    rows = [{'message': 'a', 'level': 'info'}]
    factory = mock_engine_factory(columns=['message', 'level'], rows=rows)
    manager = ConnectionManager(options, engine_factory=factory)

    columns, result = manager.execute(Statement('SELECT [message], [level] FROM [t]'))
    assert columns == ['message', 'level']
    assert result == rows


def test_execute_failure_propagates(options, mock_engine_factory):
    import sqlalchemy as sa
    factory = mock_engine_factory(fail=True)
    manager = ConnectionManager(options, engine_factory=factory)

    with pytest.raises(sa.exc.OperationalError):
        manager.execute(Statement('SELECT 1'))
    assert manager.calls == 1


def test_close_disposes_engine(options, mock_engine_factory):
    factory = mock_engine_factory()
    with ConnectionManager(options, engine_factory=factory):
        pass
    factory.engine.dispose.assert_called_once()


if __name__ == '__main__':
    __import__('pytest').main([__file__])
