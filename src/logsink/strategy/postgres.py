"""
PostgreSQL-specific strategy implementation.
"""
import logging
from typing import TYPE_CHECKING

import sqlalchemy as sa
from logsink.strategy.base import DialectStrategy, register_strategy

if TYPE_CHECKING:
    from logsink.options import SinkOptions

logger = logging.getLogger(__name__)


@register_strategy('postgresql')
class PostgresStrategy(DialectStrategy):
    """PostgreSQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def build_connection_url(self, options: 'SinkOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for PostgreSQL (psycopg driver)."""
        query = {'application_name': options.appname}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)
        if options.encrypt:
            query['sslmode'] = 'require'

        return sa.URL.create(
            drivername='postgresql+psycopg',
            username=options.user,
            password=options.password,
            host=options.server,
            port=options.port or None,
            database=options.database,
            query=query,
            )

    def limit_clause(self, limit: int | None) -> tuple[str, str]:
        if limit is None:
            return '', ''
        return '', f' LIMIT {limit}'
