import logging
import sys
from unittest.mock import MagicMock

import pytest
from logsink.exceptions import SinkError
from logsink.handler import SqlLogHandler, record_to_dict
from logsink.transport import SqlTransport


def make_record(name='app', level=logging.WARNING, msg='hello %s', args=('world',),
                exc_info=None, extra=None):
    logger = logging.getLogger(name)
    return logger.makeRecord(name, level, 'app.py', 10, msg, args, exc_info, extra=extra)


@pytest.fixture
def transport():
    return MagicMock(spec=SqlTransport)


def test_record_to_dict():
    data = record_to_dict(make_record(extra={'port': 8080, 'user': 'bob'}))

    assert data == {
        'level': 'warning',
        'message': 'hello world',
        'logger': 'app',
        'port': 8080,
        'user': 'bob',
    }


def test_record_to_dict_exception():
    try:
        raise ValueError('bad value')
    except ValueError:
        record = make_record(level=logging.ERROR, msg='failed', args=(), exc_info=sys.exc_info())

    data = record_to_dict(record)
    assert data['level'] == 'error'
    assert 'ValueError: bad value' in data['exc_info']


def test_emit_passes_record_to_transport(transport):
    handler = SqlLogHandler(transport)
    handler.emit(make_record(extra={'port': 8080}))

    transport.log.assert_called_once()
    record = transport.log.call_args.args[0]
    assert record['level'] == 'warning'
    assert record['message'] == 'hello world'
    assert record['port'] == 8080


def test_emit_skips_own_records(transport):
    handler = SqlLogHandler(transport)
    handler.emit(make_record(name='logsink.connection'))
    handler.emit(make_record(name='logsink'))

    transport.log.assert_not_called()


def test_emit_errors_go_to_handle_error(transport):
    transport.log.side_effect = SinkError('Transport is closed')
    handler = SqlLogHandler(transport)
    handler.handleError = MagicMock()

    record = make_record()
    handler.emit(record)

    handler.handleError.assert_called_once_with(record)


def test_handler_on_logger(transport):
    handler = SqlLogHandler(transport, level=logging.INFO)
    logger = logging.getLogger('tests.handler.app')
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    try:
        logger.debug('dropped')
        logger.info('kept', extra={'request_id': 'r1'})
    finally:
        logger.removeHandler(handler)

    transport.log.assert_called_once()
    assert transport.log.call_args.args[0]['request_id'] == 'r1'


def test_close_leaves_shared_transport_open(transport):
    handler = SqlLogHandler(transport)
    handler.close()
    transport.close.assert_not_called()


def test_close_owned_transport(tmp_path):
    handler = SqlLogHandler({'drivername': 'sqlite', 'server': 'localhost', 'user': 'u',
                             'password': 'p', 'database': str(tmp_path / 'logs.db'),
                             'table': 'logs'})
    assert handler.owns_transport is True

    handler.close()
    assert handler.transport.closed is True


if __name__ == '__main__':
    __import__('pytest').main([__file__])
