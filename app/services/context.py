"""Per-request identity passed explicitly into service calls."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RequestContext:
    """Who is acting on this request, resolved once per request."""

    user_id: str
    is_admin: bool = False
    email: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None
