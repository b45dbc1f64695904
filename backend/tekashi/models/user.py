"""
User table
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, CheckConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func
from tekashi.core.database import Base


class User(Base):
    """
    Store accounts, created on first authenticated request or by an admin
    """
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("loyalty_points >= 0", name="ck_users_loyalty_points"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # Identity
    auth_uid = Column(String(128), unique=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255))

    # Contact
    phone = Column(String(20))
    address = Column(String(200))
    location = Column(JSONB)
    language = Column(String(2), nullable=False, server_default="es")

    # Access
    role = Column(String(20), nullable=False, server_default="customer", index=True)
    is_active = Column(Boolean, nullable=False, server_default="true")
    last_login_at = Column(DateTime(timezone=True))

    loyalty_points = Column(Integer, nullable=False, server_default="0")

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
