"""Communication serializers."""
from rest_framework import serializers

from .models import Alert


class AlertSerializer(serializers.ModelSerializer):
    type_display = serializers.CharField(source='get_alert_type_display', read_only=True)
    disciple_name = serializers.CharField(source='disciple.name', read_only=True, default=None)

    class Meta:
        model = Alert
        fields = [
            'id', 'leader', 'disciple', 'disciple_name', 'alert_type', 'type_display',
            'title', 'message', 'alert_date', 'is_read', 'read_at', 'is_active', 'created_at',
        ]
        read_only_fields = ['id', 'leader', 'is_read', 'read_at', 'created_at']

    def validate_disciple(self, value):
        """A leader may only attach alerts to their own disciples."""
        request = self.context.get('request')
        leader = getattr(getattr(request, 'user', None), 'leader_profile', None)
        if value is not None and (leader is None or value.leader_id != leader.pk):
            raise serializers.ValidationError('Discípulo não encontrado.')
        return value
