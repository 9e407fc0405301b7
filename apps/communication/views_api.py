"""Communication API Views."""
from django.utils import timezone
from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.permissions import IsLeader, get_leader

from .models import Alert
from .serializers import AlertSerializer


class AlertViewSet(viewsets.ModelViewSet):
    serializer_class = AlertSerializer
    permission_classes = [IsAuthenticated, IsLeader]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['alert_type', 'is_read', 'is_active', 'disciple']
    search_fields = ['title', 'message']
    ordering_fields = ['alert_date', 'created_at']
    ordering = ['-alert_date']

    def get_queryset(self):
        leader = get_leader(self.request.user)
        if leader is None:
            return Alert.objects.none()
        return Alert.objects.filter(leader=leader).select_related('disciple')

    def perform_create(self, serializer):
        serializer.save(leader=get_leader(self.request.user))

    @action(detail=True, methods=['post'], url_path='mark-read')
    def mark_read(self, request, pk=None):
        """Mark an alert as read, or unread with {"is_read": false}."""
        alert = self.get_object()
        is_read = request.data.get('is_read', True) not in (False, 'false', '0', 0)
        alert.is_read = is_read
        alert.read_at = timezone.now() if is_read else None
        alert.save(update_fields=['is_read', 'read_at', 'updated_at'])
        return Response(self.get_serializer(alert).data)

    @action(detail=True, methods=['post'], url_path='toggle-active')
    def toggle_active(self, request, pk=None):
        """Switch an alert on or off."""
        alert = self.get_object()
        if alert.is_active:
            alert.deactivate()
        else:
            alert.activate()
        return Response(self.get_serializer(alert).data)

    @action(detail=False, methods=['get'])
    def unread_count(self, request):
        """Return count of unread, active alerts."""
        count = self.get_queryset().filter(is_read=False, is_active=True).count()
        return Response({'count': count})
