"""
Session gate for editor operations.

The Newsroom has a single "is authenticated" gate: any active, logged-in
user is an editor. Views enforce it through DRF permission classes; every
editor workflow function also receives the acting user explicitly and checks
it with `require_authenticated` before touching any store.

Usage:
    from apps.core.permissions import require_authenticated

    def approve(user, submission_id):
        require_authenticated(user)
        ...
"""

import logging

from rest_framework.permissions import BasePermission, SAFE_METHODS

from apps.core.exceptions import AuthError

logger = logging.getLogger(__name__)


def is_editor(user) -> bool:
    """True for an active, authenticated user."""
    return bool(
        user is not None
        and getattr(user, 'is_authenticated', False)
        and getattr(user, 'is_active', False)
    )


def require_authenticated(user):
    """
    Fail with AuthError unless `user` is an active, authenticated session.

    Returns the user so calls can be chained.
    """
    if not is_editor(user):
        logger.warning("Rejected editor operation without an authenticated session")
        raise AuthError("You must be signed in to perform this action")
    return user


class IsEditor(BasePermission):
    """Allow access to active, authenticated users."""
    message = "Editor access required."

    def has_permission(self, request, view):
        return is_editor(request.user)


class IsEditorOrReadOnly(BasePermission):
    """Public reads, editor-only writes."""
    message = "Editor access required for write operations."

    def has_permission(self, request, view):
        if request.method in SAFE_METHODS:
            return True
        return is_editor(request.user)
