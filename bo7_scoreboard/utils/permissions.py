"""
Admin privilege checks.

Privilege is delegated entirely to Discord: a member is an admin when they hold
the configured role. Users outside a guild (DMs) never are.
"""


def has_admin_role(member, role_name: str) -> bool:
    """Return True if the member holds a role with exactly this name."""
    roles = getattr(member, "roles", None)
    if not roles:
        return False
    return any(role.name == role_name for role in roles)
