"""
SQL log sink: persist structured log records into a database table and
query them back by time range.

Entry points:
- `SqlTransport(options)` / `create_transport(options, config)` - the sink
- `SqlLogHandler(transport_or_options)` - standard library logging handler
"""
__version__ = '0.1.0'

from logsink.connection import ConnectionManager
from logsink.exceptions import ConfigError, ConnectionFailure
from logsink.exceptions import ReadExecutionError, SerializationError
from logsink.exceptions import SinkError, WriteExecutionError
from logsink.handler import SqlLogHandler
from logsink.mapper import map_record
from logsink.options import FieldMapping, SinkOptions
from logsink.query import QueryOptions
from logsink.sql import Statement
from logsink.transport import LOGGED, SqlTransport, create_transport
from logsink.utils.sql_generation import build_insert, build_select

__all__ = [
    'SqlTransport',
    'create_transport',
    'SqlLogHandler',
    'ConnectionManager',
    'SinkOptions',
    'FieldMapping',
    'QueryOptions',
    'Statement',
    'LOGGED',
    'map_record',
    'build_insert',
    'build_select',
    'SinkError',
    'ConfigError',
    'ConnectionFailure',
    'SerializationError',
    'WriteExecutionError',
    'ReadExecutionError',
]
