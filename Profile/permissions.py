from rest_framework.permissions import BasePermission, SAFE_METHODS


def can_edit_profile(actor, profile):
    """Only the owning user may change a profile."""
    if actor is None or not getattr(actor, "is_authenticated", False):
        return False
    return profile.user_id == actor.pk


class IsProfileOwnerOrReadOnly(BasePermission):
    message = "You can only edit your own profile"

    def has_object_permission(self, request, view, obj):
        if request.method in SAFE_METHODS:
            return True
        return can_edit_profile(request.user, obj)
