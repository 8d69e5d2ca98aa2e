from sqlalchemy import Column, String, Text, Integer, ForeignKey, Uuid, DateTime
from sqlalchemy.orm import relationship

from app.db.base import BaseModel


class DocumentShare(BaseModel):
    __tablename__ = "document_shares"
    
    document_id = Column(Uuid(as_uuid=True), ForeignKey("documents.uuid", ondelete="CASCADE"), nullable=False, index=True)
    access_token = Column(String(128), unique=True, index=True, nullable=False)
    permission = Column(String(16), nullable=False, default="VIEW")
    shared_by_user_id = Column(String(255), nullable=False)
    shared_with_email = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=True)
    expires_at = Column(DateTime, nullable=True)
    view_count = Column(Integer, nullable=False, default=0)
    last_viewed_at = Column(DateTime, nullable=True)
    message = Column(Text, nullable=True)
    
    # Relationships
    document = relationship("Document", back_populates="shares")
