"""Database components."""

from appserver.db.base import Base
from appserver.db.session import Database

__all__ = ["Base", "Database"]
