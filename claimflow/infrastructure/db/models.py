"""
SQLAlchemy models for the database.
Maps the claim management entities to database tables.
"""

from datetime import datetime, timezone
import uuid

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Boolean,
    Numeric, Date, Float, ForeignKey, JSON, Enum as SQLEnum,
    Index,
)
from sqlalchemy.orm import relationship, declarative_base

from claimflow.domain.models.user import UserRole
from claimflow.domain.models.claim import ClaimStatus, ClaimPriority
from claimflow.domain.models.notification import NotificationType, JobStatus


Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp; every datetime column stores UTC without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


def _enum(enum_cls, name: str) -> SQLEnum:
    # Persist the enum values ("rcm_specialist"), not the member names.
    return SQLEnum(
        enum_cls,
        name=name,
        values_callable=lambda members: [member.value for member in members],
        native_enum=False,
        validate_strings=True,
    )


class OrganizationModel(Base):
    """Tenant owning users, claims and files."""
    __tablename__ = 'organizations'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    users = relationship("UserModel", back_populates="organization")


class UserModel(Base):
    """Application user; never physically deleted."""
    __tablename__ = 'users'

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(_enum(UserRole, "user_role"), nullable=False, default=UserRole.BILLER)
    organization_id = Column(String(36), ForeignKey('organizations.id'), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime)

    # Password reset (hashed token, short-lived)
    password_reset_token = Column(String(64))
    password_reset_expires = Column(DateTime)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    organization = relationship("OrganizationModel", back_populates="users")
    sessions = relationship("UserSessionModel", back_populates="user")

    __table_args__ = (
        Index('idx_users_organization', 'organization_id'),
    )


class UserSessionModel(Base):
    """Server-side session backing an issued token pair."""
    __tablename__ = 'user_sessions'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    user_agent = Column(Text)
    ip_address = Column(String(45))
    created_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("UserModel", back_populates="sessions")

    __table_args__ = (
        Index('idx_user_sessions_user_expires', 'user_id', 'expires_at'),
    )


class ClaimModel(Base):
    """Denied insurance claim worked by the revenue cycle team."""
    __tablename__ = 'claims'

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey('organizations.id'), nullable=False)
    claim_number = Column(String(100), nullable=False)
    patient_name = Column(String(255))
    payer_id = Column(String(100))
    payer_name = Column(String(255))
    date_of_service = Column(Date, nullable=False)
    total_charge = Column(Numeric(12, 2), nullable=False)
    cpt_codes = Column(JSON, nullable=False, default=list)
    denial_code = Column(String(20))
    denial_reason = Column(Text)
    status = Column(_enum(ClaimStatus, "claim_status"), nullable=False, default=ClaimStatus.PENDING)
    priority = Column(_enum(ClaimPriority, "claim_priority"), nullable=False, default=ClaimPriority.MEDIUM)

    # Assignment
    assigned_to = Column(String(36), ForeignKey('users.id'))
    assigned_at = Column(DateTime)

    # Analysis results
    ai_recommended_action = Column(Text)
    ai_confidence_score = Column(Float)
    ai_analyzed_at = Column(DateTime)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    assignee = relationship("UserModel", foreign_keys=[assigned_to])
    actions = relationship(
        "ClaimActionModel",
        back_populates="claim",
        order_by="ClaimActionModel.created_at.desc()",
    )

    __table_args__ = (
        Index('idx_claims_org_status', 'organization_id', 'status'),
        Index('idx_claims_org_priority', 'organization_id', 'priority'),
        Index('idx_claims_assigned', 'assigned_to'),
    )


class ClaimActionModel(Base):
    """History entry for a claim."""
    __tablename__ = 'claim_actions'

    id = Column(String(36), primary_key=True, default=new_id)
    claim_id = Column(String(36), ForeignKey('claims.id'), nullable=False)
    user_id = Column(String(36), ForeignKey('users.id'))
    action_type = Column(String(50), nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    claim = relationship("ClaimModel", back_populates="actions")

    __table_args__ = (
        Index('idx_claim_actions_claim', 'claim_id'),
    )


class NotificationModel(Base):
    """Per-user notification."""
    __tablename__ = 'notifications'

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey('users.id'), nullable=False)
    organization_id = Column(String(36), ForeignKey('organizations.id'), nullable=False)
    type = Column(_enum(NotificationType, "notification_type"), nullable=False, default=NotificationType.IN_APP)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    related_claim_id = Column(String(36), ForeignKey('claims.id'))
    action_url = Column(String(500))
    is_read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_notifications_user_read', 'user_id', 'is_read'),
    )


class StoredFileModel(Base):
    """Uploaded file metadata; contents live on disk."""
    __tablename__ = 'files'

    id = Column(String(36), primary_key=True, default=new_id)
    organization_id = Column(String(36), ForeignKey('organizations.id'), nullable=False)
    uploaded_by = Column(String(36), ForeignKey('users.id'), nullable=False)
    original_name = Column(String(255), nullable=False)
    content_type = Column(String(100))
    size_bytes = Column(Integer, nullable=False)
    storage_path = Column(String(500), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_files_organization', 'organization_id'),
    )


class BackgroundJobModel(Base):
    """Durable queue entry processed by the job worker."""
    __tablename__ = 'background_jobs'

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    organization_id = Column(String(36))
    payload = Column(JSON, nullable=False, default=dict)
    status = Column(_enum(JobStatus, "job_status"), nullable=False, default=JobStatus.PENDING)
    attempts = Column(Integer, nullable=False, default=0)
    max_attempts = Column(Integer, nullable=False, default=3)
    run_at = Column(DateTime, nullable=False, default=utcnow)
    started_at = Column(DateTime)
    last_error = Column(Text)
    result = Column(JSON)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_background_jobs_due', 'status', 'run_at'),
    )


# Create tables if they don't exist (for development)
def create_all_tables(engine):
    """Create all tables in the database"""
    Base.metadata.create_all(bind=engine)


def drop_all_tables(engine):
    """Drop all tables in the database"""
    Base.metadata.drop_all(bind=engine)
