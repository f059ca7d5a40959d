"""
Base strategy interface for dialect-specific behaviour.

Each concrete strategy knows how its database spells identifiers and row
limits, how to reach the server through SQLAlchemy, and which bind values
its driver needs converted. The statement builders and the connection
manager only talk to this interface.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from logsink.sql import quote_identifier as sql_quote_identifier

if TYPE_CHECKING:
    from logsink.options import SinkOptions

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DialectStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('mssql')
        class SQLServerStrategy(DialectStrategy):
            ...
    """
    def decorator(cls: type['DialectStrategy']) -> type['DialectStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class DialectStrategy(ABC):
    """Base class for dialect-specific operations.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'mssql', 'sqlite')."""

    @abstractmethod
    def build_connection_url(self, options: 'SinkOptions') -> sa.URL:
        """Build the database connection URL for this dialect.

        Args:
            options: SinkOptions containing connection parameters

        Returns
            SQLAlchemy URL object
        """

    def get_engine_kwargs(self, options: 'SinkOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for this dialect.

        The default is a bounded QueuePool sized from the options.
        """
        return {
            'pool_size': options.pool_max_connections,
            'max_overflow': 0,
            'pool_recycle': options.pool_idle_timeout,
            'pool_pre_ping': True,
            'pool_reset_on_return': 'rollback',
            }

    @abstractmethod
    def limit_clause(self, limit: int | None) -> tuple[str, str]:
        """Return the (prefix, suffix) pair that restricts a SELECT to `limit` rows.

        The prefix goes right after SELECT, the suffix after ORDER BY. Both
        are empty when `limit` is None.
        """

    @classmethod
    def validate_options(cls, options: 'SinkOptions') -> None:
        """Validate options for this dialect.

        Raises
            ValueError: If a dialect-specific option is unusable
        """

    def quote_identifier(self, identifier: str) -> str:
        """Quote a database identifier.

        Args:
            identifier: Database identifier to be quoted

        Returns
            str: Properly quoted identifier according to database-specific rules
        """
        return sql_quote_identifier(identifier, self.dialect_name)

    def convert_bind_value(self, value: Any) -> Any:
        """Adapt a bind value for the driver. Identity by default."""
        return value
