"""Care API Views."""
from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.permissions import IsLeader, get_leader

from .models import Meeting, PrayerRequest
from .serializers import MeetingSerializer, PrayerRequestSerializer, PrayerCompletionSerializer


class LeaderOwnedViewSet(viewsets.ModelViewSet):
    """Rows owned by the requesting leader; new rows are stamped with that leader."""
    permission_classes = [IsAuthenticated, IsLeader]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    model = None

    def get_queryset(self):
        leader = get_leader(self.request.user)
        if leader is None:
            return self.model.objects.none()
        return self.model.objects.filter(leader=leader).select_related('disciple')

    def perform_create(self, serializer):
        serializer.save(leader=get_leader(self.request.user))


class MeetingViewSet(LeaderOwnedViewSet):
    """The leader's meeting log."""
    model = Meeting
    serializer_class = MeetingSerializer
    filterset_fields = ['disciple']
    search_fields = ['topic', 'discussion_notes', 'next_steps', 'disciple__name']
    ordering_fields = ['meeting_date', 'created_at']
    ordering = ['-meeting_date']


class PrayerRequestViewSet(LeaderOwnedViewSet):
    """The leader's prayer requests, personal or about a disciple."""
    model = PrayerRequest
    serializer_class = PrayerRequestSerializer
    filterset_fields = ['status', 'urgency', 'category', 'disciple']
    search_fields = ['request', 'category', 'testimony', 'disciple__name']
    ordering_fields = ['requested_at', 'completed_at', 'created_at']
    ordering = ['-requested_at']

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """Mark the request as answered with an optional testimony."""
        prayer = self.get_object()
        serializer = PrayerCompletionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        prayer.mark_completed(testimony=serializer.validated_data['testimony'])
        return Response(self.get_serializer(prayer).data)
