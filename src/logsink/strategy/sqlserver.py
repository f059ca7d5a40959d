"""
SQL Server-specific strategy implementation.

It handles SQL Server's features such as:
- Proper quoting of identifiers with square brackets
- TOP (n) row limits
- ODBC connection attributes for encryption and certificate trust
"""
import logging
from typing import TYPE_CHECKING

import sqlalchemy as sa
from logsink.exceptions import ConfigError
from logsink.strategy.base import DialectStrategy, register_strategy

if TYPE_CHECKING:
    from logsink.options import SinkOptions

logger = logging.getLogger(__name__)


@register_strategy('mssql')
class SQLServerStrategy(DialectStrategy):
    """SQL Server-specific operations"""

    @property
    def dialect_name(self) -> str:
        return 'mssql'

    def build_connection_url(self, options: 'SinkOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for SQL Server over pyodbc."""
        query = {
            'driver': options.odbc_driver,
            'Encrypt': 'yes' if options.encrypt else 'no',
            'TrustServerCertificate': 'yes' if options.trust_server_certificate else 'no',
            'APP': options.appname,
            }
        if options.timeout:
            query['LoginTimeout'] = str(options.timeout)

        return sa.URL.create(
            drivername='mssql+pyodbc',
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
        return f'TOP ({limit}) ', ''

    @classmethod
    def validate_options(cls, options: 'SinkOptions') -> None:
        if not options.odbc_driver:
            raise ConfigError('odbc_driver is required for SQL Server')
