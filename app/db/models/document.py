from sqlalchemy import Column, String, Text, Integer, ForeignKey, Uuid, JSON, UniqueConstraint
from sqlalchemy.orm import relationship

from app.db.base import BaseModel


class Document(BaseModel):
    __tablename__ = "documents"
    
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False, default="")
    status = Column(String(16), nullable=False, default="DRAFT")
    document_type = Column(String(100), nullable=False, default="Other")
    jurisdiction = Column(String(100), nullable=True, default="General")
    user_id = Column(String(255), nullable=False, index=True)
    organization_id = Column(String(255), nullable=False, index=True)
    
    # Relationships
    versions = relationship(
        "DocumentVersion", back_populates="document",
        cascade="all, delete-orphan", passive_deletes=True
    )
    shares = relationship(
        "DocumentShare", back_populates="document",
        cascade="all, delete-orphan", passive_deletes=True
    )


class DocumentVersion(BaseModel):
    __tablename__ = "document_versions"
    __table_args__ = (
        UniqueConstraint("document_id", "version_number", name="uq_document_versions_number"),
    )
    
    document_id = Column(Uuid(as_uuid=True), ForeignKey("documents.uuid", ondelete="CASCADE"), nullable=False)
    version_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    status = Column(String(16), nullable=False)
    change_type = Column(String(16), nullable=False)
    change_summary = Column(String(500), nullable=False, default="")
    changed_fields = Column(JSON, nullable=False, default=list)
    user_id = Column(String(255), nullable=False)
    user_name = Column(String(255), nullable=True)
    user_avatar = Column(String(255), nullable=True)
    audit_log_id = Column(String(255), nullable=True)
    
    # Relationships
    document = relationship("Document", back_populates="versions")
