"""
Pooled connection management for the log sink.

The `ConnectionManager` owns one SQLAlchemy engine (and its pool) for the
lifetime of a transport:
1. The engine is created at construction, no network activity happens yet
2. `open()` connects in the background and warms the pool's minimum size
3. `execute()` runs one bound statement per pooled connection checkout
4. `close()` disposes the engine

Connection failures never fail construction. They are reported through the
module logger and every later statement fails on its own.
"""
import logging
import threading
import time
from concurrent.futures import Executor, Future
from typing import Any, Self

import sqlalchemy as sa
from logsink.exceptions import ConnectionFailure
from logsink.options import SinkOptions
from logsink.sql import Statement
from logsink.utils.connection_utils import create_engine_for_options

logger = logging.getLogger(__name__)


def report(options: SinkOptions, message: str, exc: BaseException | None = None) -> None:
    """Log a sink event, loudly when the console flag is set.
    """
    if exc is not None:
        level = logging.ERROR if options.console else logging.DEBUG
        logger.log(level, f'{message}: {exc}')
    else:
        level = logging.INFO if options.console else logging.DEBUG
        logger.log(level, message)


class ConnectionManager:
    """Owns the pooled connection to the log database.

    Tracks statement counts and execution time like a wrapped connection.
    """

    def __init__(self, options: SinkOptions, engine_factory=sa.create_engine) -> None:
        self.options = options
        self.engine = create_engine_for_options(options, engine_factory=engine_factory)
        self.connected = False
        self.calls = 0
        self.time = 0
        self._stats_lock = threading.Lock()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def connect(self) -> bool:
        """Check out the pool's first connections.

        Returns True on success. Failures are reported, not raised.
        """
        connections = []
        try:
            for _ in range(max(1, self.options.pool_min_connections)):
                connections.append(self.engine.connect())
        except sa.exc.SQLAlchemyError as err:
            failure = ConnectionFailure("Couldn't connect to the log database. Please check the settings.")
            failure.__cause__ = err
            report(self.options, str(failure), err)
            self.connected = False
            return False
        finally:
            for conn in connections:
                conn.close()

        self.connected = True
        report(self.options, f'Log database connection established ({self.options.drivername})')
        return True

    def open(self, executor: Executor) -> Future:
        """Connect in the background on `executor`."""
        return executor.submit(self.connect)

    def execute(self, statement: Statement) -> tuple[list[str], list[dict]] | None:
        """Execute one statement in its own transaction.

        Returns
            (columns, rows) for statements that return rows, else None

        Raises
            sqlalchemy.exc.SQLAlchemyError: If the database rejects the statement
        """
        start = time.time()
        try:
            with self.engine.begin() as conn:
                result = conn.execute(sa.text(statement.sql), statement.params)
                if not result.returns_rows:
                    return None
                columns = list(result.keys())
                rows = [dict(row) for row in result.mappings()]
                return columns, rows
        finally:
            self.addcall(time.time() - start)

    def addcall(self, elapsed: float) -> None:
        with self._stats_lock:
            self.time += elapsed
            self.calls += 1

    def close(self) -> None:
        """Dispose of the engine and every pooled connection."""
        self.engine.dispose()
        logger.debug(f'Connection pool closed: {self.calls} statements in {self.time:.2f}s '
                     f'(avg: {self.time/max(1,self.calls):.3f}s per statement)')
