"""Request and response schemas for /api/user and /api/auth."""
from datetime import datetime

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    """Profile fields exposed to the signed-in user."""

    email: str
    name: str | None = None
    analysis_count: int = 0
    plan: str = "free"
    created_at: datetime
    last_login_at: datetime | None = None

    model_config = {"from_attributes": True}


class ProfileResponse(BaseModel):
    success: bool = True
    user: UserProfile


class ProviderRead(BaseModel):
    id: int
    provider: str
    provider_account_id: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ProvidersResponse(BaseModel):
    success: bool = True
    providers: list[ProviderRead]


class UnlinkProviderRequest(BaseModel):
    provider: str = Field(min_length=1)


class CreditResponse(BaseModel):
    success: bool = True
    analysis_count: int
    message: str


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class SignInRequest(BaseModel):
    """Identity verified by the OAuth front end after a successful sign-in."""

    email: str = Field(min_length=3)
    provider: str = Field(min_length=1)
    provider_account_id: str = Field(min_length=1)
    name: str | None = None


class SignInResponse(BaseModel):
    success: bool = True
    token: str
    user: UserProfile | None = None
    warnings: list[str] = Field(default_factory=list)


class AuthProvidersResponse(BaseModel):
    success: bool = True
    providers: list[str]
