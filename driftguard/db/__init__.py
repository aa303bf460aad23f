"""Database layer package for all SQL and persistence boundaries."""

from .application_status import ApplicationStatusRecord, SQLAlchemyApplicationStatusService
from .session import db_create_engine

__all__ = [
	"ApplicationStatusRecord",
	"SQLAlchemyApplicationStatusService",
	"db_create_engine",
]
