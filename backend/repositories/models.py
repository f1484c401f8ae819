"""
SQLAlchemy ORM models for persistence.
"""
from datetime import datetime
from sqlalchemy import Column, DateTime, JSON, String, Text

from db import Base


class GuideORM(Base):
    __tablename__ = "guides"

    id = Column(String, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    heading_pattern = Column(String, nullable=False, default="markdown")
    city_images = Column(JSON, nullable=False, default=dict)
    coordinates = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
