"""
Pydantic schemas for API request/response validation.

Provides standardized request and response models for the journal API.
Trade and message input models live in ``tradersjournal.journal.models``.
"""

import re
from typing import Any, Literal, Optional, List

from pydantic import BaseModel, EmailStr, Field, field_validator


# ==================== RESPONSE MODELS ====================


class PaginatedResponse(BaseModel):
    """Response with pagination info."""

    data: List[Any]
    page: int = 1
    per_page: int = 50
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, data: List[Any], page: int, per_page: int, total: int) -> "PaginatedResponse":
        total_pages = max(1, -(-total // per_page))
        return cls(
            data=data,
            page=page,
            per_page=per_page,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


# ==================== AUTH MODELS ====================


class LoginRequest(BaseModel):
    """User login request."""

    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """User registration request."""

    username: str = Field(..., min_length=6)
    email: EmailStr
    password: str = Field(..., min_length=8)
    captcha_token: Optional[str] = None

    @field_validator("password")
    @classmethod
    def _check_password_strength(cls, value: str) -> str:
        if not re.search(r"[a-z]", value):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"[A-Z]", value):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[0-9]", value):
            raise ValueError("Password must contain at least one number")
        if not re.search(r"[^a-zA-Z0-9]", value):
            raise ValueError("Password must contain at least one special character")
        return value


class PasswordResetRequest(BaseModel):
    """Password reset request."""

    email: EmailStr


class DeleteAccountRequest(BaseModel):
    """Account deletion; the password is re-verified."""

    password: str = Field(..., min_length=1)


# ==================== TRADE MODELS ====================


class TagRenameRequest(BaseModel):
    old_tag: str = Field(..., min_length=1, max_length=20)
    new_tag: str = Field(..., min_length=1, max_length=20)


class TagDeleteRequest(BaseModel):
    tag: str = Field(..., min_length=1, max_length=20)


class AISummaryRequest(BaseModel):
    """Request for an AI summary of the caller's trades."""

    mode: Literal["tags", "strategy"] = "tags"


# ==================== ADMIN MODELS ====================


class AnnouncementRequest(BaseModel):
    """Project-update announcement."""

    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    selected_user_ids: List[str] = Field(default_factory=list)
    send_to_all: bool = False


# ==================== CAPTCHA MODELS ====================


class TurnstileVerifyRequest(BaseModel):
    token: Optional[str] = None
    action: Optional[str] = None
    cdata: Optional[str] = None


# ==================== HELPER FUNCTIONS ====================


def success_response(data: Any = None, message: str = None) -> dict:
    """Create a standardized success response dict."""
    response = {"success": True}
    if data is not None:
        response["data"] = data
    if message:
        response["message"] = message
    return response
