from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------- Requests ----------
# Fields stay loose; the services own validation so that
# every rejection carries the same {error} body.

class LoginRequest(BaseModel):
    token: Optional[Any] = None


class AdminLoginRequest(BaseModel):
    keyword: Optional[Any] = None


class GenerateTokensRequest(BaseModel):
    count: Any = 1


class ReadingRequest(BaseModel):
    cards: Optional[Any] = None


# ---------- Responses ----------

class SuccessResponse(BaseModel):
    success: bool = True


class AdminCheckResponse(BaseModel):
    isAdmin: bool


class AccessTokenOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    token: str
    used: bool
    created_at: datetime = Field(alias="createdAt")


class TokenResponse(BaseModel):
    token: str


class TokensResponse(BaseModel):
    tokens: List[str]


class TokenListResponse(BaseModel):
    tokens: List[AccessTokenOut]


class ReadingResponse(BaseModel):
    reading: str


class CardsResponse(BaseModel):
    cards: List[str]


class HealthResponse(BaseModel):
    status: str
    version: str
    has_gemini_token: bool
