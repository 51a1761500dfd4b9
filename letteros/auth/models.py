from pydantic import Field
from typing import Optional
from letteros.models.base import CamelModel

class SessionRequest(CamelModel):
    id_token: str = Field(..., min_length=1)

class SessionUser(CamelModel):
    id: str
    email: str
    name: Optional[str] = None

class SessionStatus(CamelModel):
    authenticated: bool
    uid: Optional[str] = None
