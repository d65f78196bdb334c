"""
dnsconsole API data models.

Login and account bodies accept missing fields so the handler can report its own
"missing field" message; DNS record bodies are validated here and otherwise
passed through to Cloudflare untouched.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Request Models (API Input)


class LoginRequest(BaseModel):
    """Operator login."""

    username: Optional[str] = Field(None, description="Operator username")
    password: Optional[str] = Field(None, description="Operator password")


class CreateAccountRequest(BaseModel):
    """Register a Cloudflare account credential."""

    id: Optional[str] = Field(None, description="Operator-chosen unique account id")
    name: Optional[str] = Field(None, description="Display name")
    token: Optional[str] = Field(None, description="Cloudflare API token (never returned)")

    def missing_fields(self) -> List[str]:
        return [name for name in ("id", "name", "token") if not (getattr(self, name) or "").strip()]


class DNSRecordPayload(BaseModel):
    """
    DNS record create/update body.

    type and name are required; content is required unless the record type
    carries structured ``data`` (SRV, CAA, ...). Any other Cloudflare field
    (ttl, proxied, priority, comment, tags, ...) is passed through as-is.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1, max_length=16, description="Record type, e.g. A, CNAME, MX")
    name: str = Field(..., min_length=1, max_length=255, description="Record name")
    content: Optional[str] = Field(None, description="Record content")

    @field_validator("type")
    @classmethod
    def normalize_type(cls, v: str) -> str:
        v = v.strip().upper()
        if not v.isalnum():
            raise ValueError("type must be alphanumeric")
        return v

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @model_validator(mode="after")
    def require_content_or_data(self):
        extra = self.model_extra or {}
        if not (self.content or "").strip() and not isinstance(extra.get("data"), dict):
            raise ValueError("content is required")
        return self

    def to_upstream(self) -> Dict[str, Any]:
        """Body forwarded to Cloudflare, extra fields included."""
        body = self.model_dump()
        if self.content is None:
            body.pop("content")
        return body


# Response Models (API Output)


class UserInfo(BaseModel):
    username: str
    role: str


class LoginResponse(BaseModel):
    token: str
    user: UserInfo
    message: str = "Login successful"


class VerifyResponse(BaseModel):
    valid: bool
    user: UserInfo


class AccountSummary(BaseModel):
    """Public view of a stored account. There is no token field by construction."""

    id: str
    name: str
    createdAt: str


class AccountListResponse(BaseModel):
    success: bool = True
    data: List[AccountSummary]


class AccountResponse(BaseModel):
    success: bool = True
    data: AccountSummary


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class UpstreamResponse(BaseModel):
    """Relayed Cloudflare result."""

    success: bool = True
    data: Any = None


class HealthResponse(BaseModel):
    success: bool
    message: str
    timestamp: str
    accounts: int


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str
