"""
Account model and the public projection handed out of the credential store.
"""
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
from sqlalchemy import Column, String, Boolean, DateTime, Enum, Index

from .base import BaseModel


class Role(str, enum.Enum):
    """Closed set of account roles."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    USER = "USER"
    VIEWER = "VIEWER"


class Account(BaseModel):
    """Account row: identity plus hashed credential."""

    __tablename__ = "account"

    email = Column(String(320), nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    role = Column(
        Enum(Role, name="account_role", native_enum=False, length=20),
        default=Role.USER,
        nullable=False,
    )

    is_verified = Column(Boolean, default=False, nullable=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("uq_account_email", "email", unique=True),
    )

    def to_record(self) -> "AccountRecord":
        return AccountRecord(
            id=self.id,
            email=self.email,
            role=Role(self.role),
            first_name=self.first_name,
            last_name=self.last_name,
            is_verified=bool(self.is_verified),
            verified_at=self.verified_at,
        )

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, verified={self.is_verified})>"


@dataclass(frozen=True)
class AccountRecord:
    """Account without secret fields."""

    id: str
    email: str
    role: Role = Role.USER
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_verified: bool = False
    verified_at: Optional[datetime] = None

    def public_profile(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role.value,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }


@dataclass(frozen=True)
class CredentialRecord:
    """Account together with its stored hash; never leaves the service layer."""

    account: AccountRecord
    password_hash: str
