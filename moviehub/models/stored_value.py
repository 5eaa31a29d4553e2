from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from moviehub.database import Base

class StoredValue(Base):
    __tablename__ = "key_value_store"

    key = Column(String(255), primary_key=True, index=True)
    value = Column(Text, nullable=False)  # JSON-encoded payload
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
