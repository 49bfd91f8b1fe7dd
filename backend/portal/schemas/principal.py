from datetime import datetime
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict

CANDIDATE = "candidate"
ADMIN = "admin"
PrincipalKind = Literal["candidate", "admin"]


class CandidatePrincipal(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["candidate"] = CANDIDATE
    user_id: str
    session_id: str  # token jti
    expires_at: datetime


class AdminPrincipal(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["admin"] = ADMIN
    email: str
    session_id: int
    expires_at: datetime


Principal = Union[CandidatePrincipal, AdminPrincipal]
