from laxdb_pipeline.db.base import Base
from laxdb_pipeline.db.engine import (
    DatabaseConfig,
    create_db_engine,
    create_session_factory,
    create_tables,
)

__all__ = [
    "Base",
    "DatabaseConfig",
    "create_db_engine",
    "create_session_factory",
    "create_tables",
]
