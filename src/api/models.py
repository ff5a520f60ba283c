"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from enum import Enum

from pydantic import BaseModel, EmailStr, Field

from src.domain.ports import SignUpState
from src.domain.signup import state_of
from src.domain.user import User


class SignUpRequest(BaseModel):
    """Request model for user registration."""

    username: str = Field(..., min_length=3, max_length=50, description="Unique username (3-50 characters)")
    email: EmailStr
    password: str = Field(..., min_length=8, description="User password (min 8 characters)")


class UserResponse(BaseModel):
    """Public view of a user."""

    public_id: str
    username: str
    email: str
    enabled: bool
    state: SignUpState

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            public_id=user.public_id,
            username=user.username,
            email=user.email,
            enabled=user.enabled,
            state=state_of(user),
        )


class UserPageResponse(BaseModel):
    """One page of users."""

    items: list[UserResponse]
    page: int
    size: int
    total: int
    total_pages: int


class OperationStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class OperationStatusResponse(BaseModel):
    """Outcome of an administrative state change."""

    status: OperationStatus


class SignUpViewResponse(BaseModel):
    """Sign-up view returned when verification fails."""

    view: str = "user/sign-up"
    error: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
