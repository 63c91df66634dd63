# Database Models for the Influencer Marketplace

from sqlalchemy import Column, String, DateTime, Enum, Boolean
from sqlalchemy.orm import declarative_base
from datetime import datetime
import uuid
import enum

Base = declarative_base()

def generate_uuid():
    return str(uuid.uuid4())


def enum_column(enum_cls, **kwargs):
    """Enum column stored by value (lowercase strings), named after the enum class."""
    return Column(
        Enum(enum_cls, values_callable=lambda x: [e.value for e in x], name=enum_cls.__name__.lower()),
        **kwargs
    )


# Enums
class UserRole(str, enum.Enum):
    BRAND = "brand"
    INFLUENCER = "influencer"
    ADMIN = "admin"


# Models
class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = enum_column(UserRole, nullable=False, default=UserRole.BRAND)
    is_active = Column(Boolean, default=True)
    last_login_at = Column(DateTime)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
