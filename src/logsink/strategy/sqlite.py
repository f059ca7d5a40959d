"""
SQLite-specific strategy implementation.

SQLite ignores the server and credentials: `database` is the file path.
In-memory databases share one connection across threads.
"""
import datetime
import logging
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from logsink.strategy.base import DialectStrategy, register_strategy
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from logsink.options import SinkOptions

logger = logging.getLogger(__name__)


@register_strategy('sqlite')
class SQLiteStrategy(DialectStrategy):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for SQLite."""
        return 'sqlite'

    def build_connection_url(self, options: 'SinkOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for SQLite."""
        return sa.URL.create(drivername='sqlite', database=options.database)

    def get_engine_kwargs(self, options: 'SinkOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for SQLite."""
        if options.database == ':memory:':
            return {
                'poolclass': StaticPool,
                'connect_args': {'check_same_thread': False},
                }
        kwargs = super().get_engine_kwargs(options)
        if options.timeout:
            kwargs['connect_args'] = {'timeout': options.timeout}
        return kwargs

    def limit_clause(self, limit: int | None) -> tuple[str, str]:
        if limit is None:
            return '', ''
        return '', f' LIMIT {limit}'

    def convert_bind_value(self, value: Any) -> Any:
        """Bind dates as text in the format of CURRENT_TIMESTAMP (UTC)."""
        if isinstance(value, datetime.datetime):
            if value.tzinfo is not None:
                value = value.astimezone(datetime.timezone.utc)
            return value.strftime('%Y-%m-%d %H:%M:%S')
        if isinstance(value, datetime.date):
            return value.strftime('%Y-%m-%d')
        return value
