# models/entities.py

from sqlalchemy import JSON, Column, DateTime, Integer, String, func

from db.base import Base

# Keys injected from row metadata; never persisted inside `data`.
METADATA_KEYS = ("id", "created_at", "updated_at", "version")


class EntityRow(Base):
    __tablename__ = "entities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    entity_type = Column(String, nullable=False, index=True)  # Service / Booking / User / Review
    data = Column(JSON, nullable=False)                       # schema-free payload
    version = Column(Integer, nullable=False, server_default="1")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
