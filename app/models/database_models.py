"""
SQLAlchemy models.
"""
from sqlalchemy import Column, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class KeyValueEntry(Base):
    """One named text blob, the server-side stand-in for browser local storage."""
    __tablename__ = "kv_store"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=False, default="")
