"""
SQL log transport.

`SqlTransport` is the adapter a logging pipeline talks to:
- `log(record, callback)` persists one record as one INSERT
- `query(options, callback)` reads records back by time range

Both calls return immediately with a Future; the database round trip runs on
the transport's worker threads. Callbacks use the `callback(error, result)`
convention.

Writes and reads handle errors differently. In fire-and-forget mode (the
default) a failed write is logged and its callback still reports success
(`callback(None, None)`); only the `logged` event tells a real outcome. With
`fire_and_forget=False` the callback receives the WriteExecutionError. Reads
always pass their error to the callback.
"""
import logging
import threading
from collections import defaultdict
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import fields
from typing import Any, Self

import sqlalchemy as sa
from logsink.connection import ConnectionManager, report
from logsink.exceptions import ReadExecutionError, SerializationError
from logsink.exceptions import SinkError, WriteExecutionError
from logsink.mapper import map_record
from logsink.options import SinkOptions
from logsink.query import QueryOptions
from logsink.sql import Statement
from logsink.utils.sql_generation import build_insert, build_select

from libb import load_options

logger = logging.getLogger(__name__)

LOGGED = 'logged'

Callback = Callable[[BaseException | None, Any], Any]


def _noop(error, result):
    pass


class SqlTransport:
    """Persist structured log records into a database table.

    Args:
        options: SinkOptions, or a mapping of option values
        engine_factory: Function used to create the SQLAlchemy engine
    """

    name = 'sql'

    def __init__(self, options: SinkOptions | Mapping[str, Any],
                 engine_factory=sa.create_engine) -> None:
        if not isinstance(options, SinkOptions):
            options = SinkOptions(**options)
        self.options = options
        self.fields = options.fields
        self.table = options.table
        self.dialect = options.drivername
        self.listeners: dict[str, list[Callable]] = defaultdict(list)
        self.closed = False
        self._worker = threading.local()
        self.executor = ThreadPoolExecutor(max_workers=options.pool_max_connections,
                                           thread_name_prefix='logsink')
        self.connection = ConnectionManager(options, engine_factory=engine_factory)
        self.connection.open(self.executor)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def on(self, event: str, listener: Callable) -> None:
        """Register a listener. `logged` listeners receive the original record."""
        self.listeners[event].append(listener)

    def off(self, event: str, listener: Callable) -> None:
        if listener in self.listeners[event]:
            self.listeners[event].remove(listener)

    def emit(self, event: str, *args: Any) -> None:
        for listener in list(self.listeners[event]):
            try:
                listener(*args)
            except Exception:
                logger.exception(f'Error in {event!r} listener {listener!r}')

    def build_insert(self, record: Mapping[str, Any]) -> Statement:
        """Map a record to its INSERT statement.

        Raises
            SerializationError: If the record cannot be mapped
        """
        row = map_record(record, self.fields)
        return build_insert(self.table, row, self.dialect)

    def build_select(self, options: QueryOptions | Mapping[str, Any] | None) -> Statement:
        return build_select(self.table, options, self.fields, self.dialect)

    def log(self, record: Mapping[str, Any], callback: Callback | None = None) -> Future:
        """Schedule a record for persistence and return immediately.

        The returned Future resolves to True when the row was written and to
        None otherwise. In fire-and-forget mode `callback` is always called
        without an error.
        """
        self._check_open()
        return self.executor.submit(self._run, self._write, record, callback or _noop)

    def query(self, options: QueryOptions | Mapping[str, Any] | None = None,
              callback: Callback | None = None) -> Future:
        """Schedule a read of persisted records and return immediately.

        Options: `from`, `until`, `limit`, `order` and `fields`. The returned
        Future resolves to the loaded rows, or None on error.
        """
        self._check_open()
        return self.executor.submit(self._run, self._read, options, callback or _noop)

    def _write(self, record: Mapping[str, Any], callback: Callback) -> bool | None:
        try:
            statement = self.build_insert(record)
        except Exception as err:
            # nothing is executed for a record that cannot be mapped
            if not isinstance(err, SerializationError):
                failure = SerializationError(f'Unable to build log insert: {err}')
                failure.__cause__ = err
                err = failure
            report(self.options, 'Unable to map log record', err)
            return self._write_failed(callback, err)

        try:
            self.connection.execute(statement)
        except Exception as err:
            failure = WriteExecutionError(f'Unable to post log in {self.table}')
            failure.__cause__ = err
            report(self.options, str(failure), err)
            return self._write_failed(callback, failure)

        self.emit(LOGGED, record)
        callback(None, True)
        return True

    def _write_failed(self, callback: Callback, error: SinkError) -> None:
        if self.options.fire_and_forget:
            callback(None, None)
        else:
            callback(error, None)

    def _read(self, options: QueryOptions | Mapping[str, Any] | None,
              callback: Callback) -> Any:
        try:
            statement = self.build_select(options)
        except (AttributeError, TypeError, ValueError) as err:
            failure = ReadExecutionError(f'Invalid query options: {err}')
            failure.__cause__ = err
            callback(failure, None)
            return None

        try:
            result = self.connection.execute(statement)
        except sa.exc.SQLAlchemyError as err:
            failure = ReadExecutionError(f'Unable to query logs from {self.table}')
            failure.__cause__ = err
            report(self.options, str(failure), err)
            callback(failure, None)
            return None

        if result is None:
            callback(None, None)
            return None

        columns, rows = result
        try:
            data = self.options.data_loader(rows, columns, table_name=self.table)
        except Exception as err:
            failure = ReadExecutionError(f'Unable to load query results from {self.table}')
            failure.__cause__ = err
            report(self.options, str(failure), err)
            callback(failure, None)
            return None
        callback(None, data)
        return data

    def _check_open(self) -> None:
        if self.closed:
            raise SinkError('Transport is closed')

    def _run(self, func: Callable, *args: Any) -> Any:
        self._worker.active = True
        try:
            return func(*args)
        finally:
            self._worker.active = False

    def close(self) -> None:
        """Wait for scheduled work, then release the worker threads and the pool.

        From a listener or callback (a worker thread) pending work is not
        waited for.
        """
        if self.closed:
            return
        self.closed = True
        try:
            self.executor.shutdown(wait=not getattr(self._worker, 'active', False))
        finally:
            self.connection.close()


@load_options(cls=SinkOptions)
def create_transport(options: SinkOptions | dict[str, Any] | str,
                     config: Any | None = None, **kw: Any) -> SqlTransport:
    """Create a SqlTransport from options

    Args:
        options: Can be:
                - SinkOptions object
                - String name of a configuration section
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        SqlTransport bound to its own connection pool
    """
    if isinstance(options, SinkOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=SinkOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    return SqlTransport(options)
