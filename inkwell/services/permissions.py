"""Ownership checks applied before any mutation"""

import logging

from inkwell.errors import PermissionDenied

logger = logging.getLogger(__name__)


def can_modify(user, resource) -> bool:
    """Admins may modify anything; everyone else only what they own."""
    if user is None:
        return False
    if user.admin:
        return True
    owner = getattr(resource, "owner", None)
    return owner is not None and owner.id == user.id


def authorize(user, resource) -> None:
    if not can_modify(user, resource):
        logger.warning(f"Permission denied: {user!r} on {resource!r}")
        raise PermissionDenied(f"Not allowed to modify {type(resource).__name__.lower()}")
