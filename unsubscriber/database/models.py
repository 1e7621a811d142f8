"""
Database models for stored emails and the unsubscribe audit log.
"""

from sqlalchemy import (
    Column, Integer, String, DateTime, Text, ForeignKey,
    create_engine, Index
)
from sqlalchemy.orm import relationship, sessionmaker, declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class EmailMessage(Base):
    """Email content available for unsubscribe attempts."""
    __tablename__ = 'email_messages'

    id = Column(Integer, primary_key=True)
    message_id = Column(String(255))  # Email Message-ID header
    sender_email = Column(String(255))
    subject = Column(Text)
    content_html = Column(Text)
    content_text = Column(Text)
    source_path = Column(Text)  # File the email was imported from
    created_at = Column(DateTime, default=func.now())

    # Relationships
    unsubscribe_logs = relationship("UnsubscribeLog", back_populates="email", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_message_id', 'message_id'),
        Index('idx_sender_email', 'sender_email'),
    )

    def __repr__(self):
        return f"<EmailMessage(id={self.id}, sender='{self.sender_email}')>"


class UnsubscribeLog(Base):
    """Audit log row for one unsubscribe attempt."""
    __tablename__ = 'unsubscribe_logs'

    id = Column(Integer, primary_key=True)
    email_id = Column(Integer, ForeignKey('email_messages.id'), nullable=False)
    acting_user = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False)  # success, error
    unsubscribe_method = Column(String(20), nullable=False)  # http, mailto, form-auto, ai-auto, manual, unknown
    unsubscribe_target = Column(Text)
    error_message = Column(Text)
    attempt_count = Column(Integer, default=1)
    last_attempted_at = Column(DateTime, default=func.now())
    created_at = Column(DateTime, default=func.now())

    # Relationships
    email = relationship("EmailMessage", back_populates="unsubscribe_logs")

    __table_args__ = (
        Index('idx_log_email', 'email_id'),
        Index('idx_log_status', 'status'),
        Index('idx_log_user', 'acting_user'),
    )

    def __repr__(self):
        return f"<UnsubscribeLog(email_id={self.email_id}, status='{self.status}', method='{self.unsubscribe_method}')>"


def create_database_engine(database_url: str = "sqlite:///unsubscribe.db"):
    """Create and return a database engine."""
    engine = create_engine(
        database_url,
        echo=False,
        pool_pre_ping=True,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {}
    )
    return engine


def create_tables(engine):
    """Create all tables in the database."""
    Base.metadata.create_all(engine)


def get_session_maker(engine):
    """Get a session maker for the database."""
    return sessionmaker(bind=engine)
