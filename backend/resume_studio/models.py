from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func
from .db import Base


class KVEntry(Base):
    """One slot of the key-value namespace; values are JSON strings."""
    __tablename__ = "kv_store"
    key = Column(String, primary_key=True)
    value = Column(Text)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
