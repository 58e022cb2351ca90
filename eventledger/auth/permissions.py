"""
Authorization
One capability check used by every mutating route: "requester has capability X on resource Y"
"""

from enum import Enum
from typing import Optional
from fastapi import Depends
from eventledger.auth.dependencies import get_current_user
from eventledger.errors import Forbidden, Unauthorized


class Capability(str, Enum):
    CREATE_EVENT = "create_event"
    MANAGE_EVENT = "manage_event"
    VIEW_STATS = "view_stats"
    REQUEST_PREDICTION = "request_prediction"


ROLE_CAPABILITIES = {
    "admin": {
        Capability.CREATE_EVENT,
        Capability.MANAGE_EVENT,
        Capability.VIEW_STATS,
        Capability.REQUEST_PREDICTION,
    },
    "attendee": {
        Capability.REQUEST_PREDICTION,
    },
}

# Capabilities that additionally require owning the resource
OWNER_SCOPED = {Capability.MANAGE_EVENT}


def authorize(user: Optional[dict], capability: Capability, resource: Optional[dict] = None) -> dict:
    """
    Check that `user` holds `capability`, and owns `resource` where the
    capability is owner-scoped.

    Raises:
        Unauthorized: no user
        Forbidden: role lacks the capability, or the resource belongs to someone else
    """
    if user is None:
        raise Unauthorized("Not authenticated")

    if capability not in ROLE_CAPABILITIES.get(user["role"], set()):
        raise Forbidden()

    if resource is not None and capability in OWNER_SCOPED:
        if str(resource.get("owner_id")) != str(user["id"]):
            raise Forbidden("Only the event owner can do this")

    return user


def require(capability: Capability):
    """FastAPI dependency enforcing a role capability (ownership is checked by the service)"""

    async def dependency(current_user: dict = Depends(get_current_user)) -> dict:
        return authorize(current_user, capability)

    return dependency


get_admin = require(Capability.VIEW_STATS)
