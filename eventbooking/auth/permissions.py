"""Role to capability mapping.

Handlers and services ask ``has_capability(user, Capability.X)`` instead of
comparing role names.
"""

from typing import Dict, FrozenSet

from eventbooking.auth.schemas import Capability, CurrentUser, RoleName

ROLE_CAPABILITIES: Dict[str, FrozenSet[Capability]] = {
    RoleName.CUSTOMER.value: frozenset({Capability.BOOK_EVENTS}),
    RoleName.ORGANIZER.value: frozenset({Capability.MANAGE_EVENTS, Capability.MANAGE_BOOKINGS}),
    RoleName.ADMIN.value: frozenset({
        Capability.MANAGE_EVENTS,
        Capability.MANAGE_BOOKINGS,
        Capability.MANAGE_PROMOTIONS,
    }),
}

def capabilities_for(roles) -> FrozenSet[Capability]:
    granted = set()
    for role in roles:
        granted |= ROLE_CAPABILITIES.get(role, frozenset())
    return frozenset(granted)

def has_capability(user: CurrentUser, capability: Capability) -> bool:
    return capability in capabilities_for(user.roles)

def is_admin(user: CurrentUser) -> bool:
    return RoleName.ADMIN.value in user.roles
