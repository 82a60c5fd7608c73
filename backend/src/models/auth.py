"""Authentication models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    """JWT issuance response."""

    token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type (always bearer)")
    expires_at: datetime = Field(..., description="Expiration timestamp")


class JWTPayload(BaseModel):
    """JWT claims payload.

    Tokens minted by an external identity provider may carry extra claims;
    they are kept but only ``sub`` identifies the caller.
    """

    model_config = ConfigDict(extra="allow")

    sub: str = Field(..., description="Subject (user_id)")
    iat: int = Field(..., description="Issued at timestamp")
    exp: int = Field(..., description="Expiration timestamp")
    email: Optional[str] = Field(None, description="Caller e-mail, when the issuer provides it")


__all__ = ["TokenResponse", "JWTPayload"]
