"""
SQLAlchemy URL and engine creation from SinkOptions.

Each sink owns its engine. There is no shared engine registry: the engine is
created once per ConnectionManager and disposed with it.
"""
import logging

import sqlalchemy as sa
from logsink.strategy import get_strategy

__all__ = [
    'create_url_from_options',
    'create_engine_for_options',
]

logger = logging.getLogger(__name__)


def create_url_from_options(options) -> sa.URL:
    """Convert SinkOptions to a SQLAlchemy URL.

    Args:
        options: SinkOptions object with connection parameters

    Returns
        sqlalchemy.URL: SQLAlchemy URL object for database connection
    """
    return get_strategy(options.drivername).build_connection_url(options)


def create_engine_for_options(options, engine_factory=sa.create_engine, **kwargs):
    """Create a pooled SQLAlchemy engine for the given options.

    Args:
        options: SinkOptions object
        engine_factory: Function to create engines (defaults to sqlalchemy.create_engine)
        **kwargs: Additional arguments passed to engine factory

    Returns
        sqlalchemy.engine.Engine: SQLAlchemy engine
    """
    strategy = get_strategy(options.drivername)
    url = create_url_from_options(options)

    engine_kwargs = {'echo': False}
    engine_kwargs.update(strategy.get_engine_kwargs(options))
    engine_kwargs.update(kwargs)

    engine = engine_factory(url, **engine_kwargs)
    logger.debug(f'Created new engine for {options.drivername} '
                 f'(pool max={options.pool_max_connections}, idle={options.pool_idle_timeout}s)')
    return engine
