"""
Data models for the session access layer using Pydantic.  Wire models
mirror the camelCase JSON used by the backend through field aliases so
the Python side can keep snake_case attribute names.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class Credential(BaseModel):
    """Access/refresh token pair held by the session store."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., min_length=1, description="Short-lived token attached to every call")
    refresh_token: str = Field(..., min_length=1, description="Long-lived token used only for renewal")

    def __repr__(self) -> str:
        # never leak token material into logs or tracebacks
        return "Credential(access_token=***, refresh_token=***)"

    __str__ = __repr__


class RefreshState(enum.Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


@dataclass
class OutboundCall:
    """Description of a single outbound call.

    ``retried`` is the replay marker: it starts false and is set the first
    time the call is re-dispatched after a renewal.  ``access_token`` holds
    the token the most recent dispatch carried.
    """

    method: str
    path: str
    payload: Any = None
    params: Optional[Mapping[str, Any]] = None
    authenticated: bool = True
    retried: bool = False
    access_token: Optional[str] = None


@dataclass
class ApiResponse:
    status: int
    payload: Any = None
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400


class RenewalRequest(BaseModel):
    """Body of the renewal endpoint request."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., alias="refreshToken")


class RenewalResponse(BaseModel):
    """Success body of the renewal endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: str = Field(..., min_length=1, alias="accessToken")


class AuthResponse(BaseModel):
    """Body returned by login and registration."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    access_token: str = Field(..., min_length=1, alias="accessToken")
    refresh_token: str = Field(..., min_length=1, alias="refreshToken")
    user: Optional[Dict[str, Any]] = None
    message: Optional[str] = None

    def credential(self) -> Credential:
        return Credential(access_token=self.access_token, refresh_token=self.refresh_token)
