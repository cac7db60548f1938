from sqlalchemy import Column, String, Text, DateTime, func
from linkforge.database import Base

class Blob(Base):
    __tablename__ = "blobs"
    key = Column(String, primary_key=True, index=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
