"""
Standard library logging integration.

    import logging
    from logsink import SqlLogHandler

    handler = SqlLogHandler({'server': 'dbhost', 'user': 'sa', 'password': '...',
                             'database': 'app', 'table': 'logs'})
    logging.getLogger().addHandler(handler)
    logging.getLogger('app').info('started', extra={'port': 8080})
"""
import logging
from collections.abc import Mapping
from typing import Any

from logsink.options import SinkOptions
from logsink.transport import SqlTransport

__all__ = ['SqlLogHandler', 'record_to_dict']

# Attributes every LogRecord carries; anything else came in through `extra`
_RESERVED_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {
    'message', 'asctime', 'taskName'}


def record_to_dict(record: logging.LogRecord, formatter: logging.Formatter | None = None) -> dict[str, Any]:
    """Convert a LogRecord to a sink record.

    The level is the lower-cased level name; the remainder (logger name,
    `extra` attributes and any formatted traceback) becomes metadata.
    """
    data = {
        'level': record.levelname.lower(),
        'message': record.getMessage(),
        'logger': record.name,
        }
    for key, value in vars(record).items():
        if key not in _RESERVED_ATTRS and not key.startswith('_'):
            data[key] = value
    if record.exc_info:
        formatter = formatter or logging.Formatter()
        data['exc_info'] = formatter.formatException(record.exc_info)
    elif record.exc_text:
        data['exc_info'] = record.exc_text
    return data


class SqlLogHandler(logging.Handler):
    """Logging handler that hands records to a SqlTransport.

    Accepts a transport, or options to build one. A transport built here is
    closed with the handler. Records from this package's own loggers are
    dropped so sink failures cannot feed back into the sink.
    """

    def __init__(self, transport: SqlTransport | SinkOptions | Mapping[str, Any],
                 level: int = logging.NOTSET) -> None:
        super().__init__(level)
        if isinstance(transport, SqlTransport):
            self.transport = transport
            self.owns_transport = False
        else:
            self.transport = SqlTransport(transport)
            self.owns_transport = True

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == 'logsink' or record.name.startswith('logsink.'):
            return
        try:
            self.transport.log(record_to_dict(record, self.formatter))
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            if self.owns_transport:
                self.transport.close()
        finally:
            super().close()
