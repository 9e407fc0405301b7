"""Care serializers."""
from rest_framework import serializers

from .models import Meeting, PrayerRequest


class LeaderDiscipleMixin:
    """Restricts the ``disciple`` field to the requesting leader's disciples."""

    def validate_disciple(self, value):
        request = self.context.get('request')
        leader = getattr(getattr(request, 'user', None), 'leader_profile', None)
        if value is not None and (leader is None or value.leader_id != leader.pk):
            raise serializers.ValidationError('Discípulo não encontrado.')
        return value


# ─── Meeting Serializers ─────────────────────────────────────────────────────


class MeetingSerializer(LeaderDiscipleMixin, serializers.ModelSerializer):
    disciple_name = serializers.CharField(source='disciple.name', read_only=True)

    class Meta:
        model = Meeting
        fields = [
            'id', 'leader', 'disciple', 'disciple_name', 'meeting_date', 'topic',
            'discussion_notes', 'next_steps', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'leader', 'created_at', 'updated_at']


# ─── Prayer Request Serializers ──────────────────────────────────────────────


class PrayerRequestSerializer(LeaderDiscipleMixin, serializers.ModelSerializer):
    disciple_name = serializers.CharField(source='disciple.name', read_only=True, default=None)
    urgency_display = serializers.CharField(source='get_urgency_display', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = PrayerRequest
        fields = [
            'id', 'leader', 'disciple', 'disciple_name', 'request', 'category',
            'urgency', 'urgency_display', 'status', 'status_display',
            'requested_at', 'completed_at', 'testimony', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'leader', 'completed_at', 'created_at', 'updated_at']


class PrayerCompletionSerializer(serializers.Serializer):
    testimony = serializers.CharField(required=False, allow_blank=True, default='')
