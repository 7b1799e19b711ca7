from rest_framework.permissions import BasePermission


class IsOwner(BasePermission):
    """
    Object-level check that the entity belongs to the requesting user.
    Keeps the ownership rule in one place for every entity family.
    """
    def has_object_permission(self, request, view, obj):
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return False
        return getattr(obj, "owner_id", None) == user.id
