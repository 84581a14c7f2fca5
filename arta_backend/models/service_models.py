"""
Service Layer Data Transfer Objects.

Pydantic models for validated input/output at service boundaries.
"""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

from arta_backend.models.enums import UserRole
from arta_backend.models.profile import normalize_email

T = TypeVar("T")

__all__ = ["AccountRequest", "ProvisioningSummary", "ServiceResult"]


class ServiceResult(BaseModel, Generic[T]):
    """
    Standard service return envelope.

    Generic over ``T`` so callers can annotate return types precisely
    (e.g. ``ServiceResult[FeedbackRecord]``).  Bare ``ServiceResult(...)``
    is treated as ``ServiceResult[Any]``.
    """

    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    status_code: int = 200


class AccountRequest(BaseModel):
    """One account to provision or seed, usually built from env vars."""

    name: str
    email: str
    password: str = Field(min_length=1, repr=False)
    role: UserRole
    department: str = ""

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return normalize_email(value)


class ProvisioningSummary(BaseModel):
    """Per-run outcome of a provisioning or seeding batch."""

    created: list[str] = Field(default_factory=list)
    updated: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)
