"""
Members serializers - DRF serializers for leader and disciple API.

Serializers:
- LeaderSerializer: Current leader profile
- DiscipleListSerializer: Lightweight serializer for lists
- DiscipleSerializer: Full disciple serializer for detail and writes
"""
from django.contrib.auth import get_user_model
from rest_framework import serializers

from .models import Leader, Disciple

User = get_user_model()


# =============================================================================
# LEADER SERIALIZERS
# =============================================================================

class LeaderSerializer(serializers.ModelSerializer):
    """Leader profile as seen by its owner."""

    active_disciples_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Leader
        fields = [
            'id',
            'name',
            'email',
            'leader_type',
            'active_disciples_count',
            'created_at',
        ]
        read_only_fields = ['id', 'created_at']


# =============================================================================
# DISCIPLE SERIALIZERS
# =============================================================================

class DiscipleListSerializer(serializers.ModelSerializer):
    """
    Lightweight serializer for disciple lists.
    """

    class Meta:
        model = Disciple
        fields = [
            'id',
            'name',
            'contact',
            'spiritual_maturity',
            'status',
            'cell_group',
            'last_contact_at',
        ]


class DiscipleSerializer(serializers.ModelSerializer):
    """
    Full disciple serializer.

    The owning leader is always the requesting leader and cannot be set by the client.
    ``user`` links a sign-in account that no other profile uses yet.
    """

    full_address = serializers.CharField(read_only=True)
    user = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.all(),
        required=False,
        allow_null=True,
    )

    class Meta:
        model = Disciple
        fields = [
            'id',
            'leader',
            'user',
            'name',
            'contact',
            'address',
            'city',
            'state',
            'postal_code',
            'full_address',
            'latitude',
            'longitude',
            'spiritual_maturity',
            'status',
            'discipleship_start_date',
            'gifts_talents',
            'growth_areas',
            'cell_group',
            'last_contact_at',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'leader', 'created_at', 'updated_at']

    def validate_user(self, value):
        """An account can back one profile only: a leader or a single disciple."""
        if value is None:
            return value
        if hasattr(value, 'leader_profile'):
            raise serializers.ValidationError('Esta conta pertence a um líder.')
        linked = getattr(value, 'disciple_profile', None)
        if linked is not None and (self.instance is None or linked.pk != self.instance.pk):
            raise serializers.ValidationError('Esta conta já está vinculada a outro discípulo.')
        return value
