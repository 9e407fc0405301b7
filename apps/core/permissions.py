"""DRF permission classes for leader/disciple access control."""
from rest_framework import permissions


class IsLeader(permissions.BasePermission):
    """Requires a leader profile (Pastor, Discipulador, Líder de Célula, Mentor)."""
    message = "Você precisa ser um líder para acessar este recurso."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        return hasattr(request.user, 'leader_profile')


class IsDisciple(permissions.BasePermission):
    """Requires a disciple profile linked to the signed-in account."""
    message = "Você precisa ser um discípulo para acessar este recurso."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        return hasattr(request.user, 'disciple_profile')


class IsLeaderOrDisciple(permissions.BasePermission):
    """Allows leaders and disciples with a linked account."""
    message = "Você precisa ser um líder ou discípulo para acessar este recurso."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        return (
            hasattr(request.user, 'leader_profile')
            or hasattr(request.user, 'disciple_profile')
        )


class IsOwningLeader(permissions.BasePermission):
    """
    Object-level: only the leader that owns the object (via obj.leader) may touch it.
    """
    message = "Você não tem permissão para modificar este recurso."

    def has_object_permission(self, request, view, obj):
        leader = get_leader(request.user)
        if leader is None:
            return False
        return getattr(obj, 'leader_id', None) == leader.pk


def get_leader(user):
    """Return the user's Leader profile or None."""
    if not user or not user.is_authenticated:
        return None
    return getattr(user, 'leader_profile', None)


def get_disciple(user):
    """Return the user's Disciple profile or None."""
    if not user or not user.is_authenticated:
        return None
    return getattr(user, 'disciple_profile', None)
