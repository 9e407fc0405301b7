"""REST API endpoints for leader profiles and disciples."""
from rest_framework import viewsets, filters
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from apps.core.permissions import IsLeader, IsOwningLeader, get_leader

from .models import Disciple
from .serializers import LeaderSerializer, DiscipleSerializer, DiscipleListSerializer


class DiscipleViewSet(viewsets.ModelViewSet):
    """CRUD operations for the requesting leader's disciples."""

    permission_classes = [IsAuthenticated, IsLeader, IsOwningLeader]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['status', 'spiritual_maturity', 'cell_group']
    search_fields = ['name', 'contact', 'city']
    ordering_fields = ['name', 'created_at', 'last_contact_at']
    ordering = ['name']

    def get_queryset(self):
        """Leaders only ever see their own disciples."""
        leader = get_leader(self.request.user)
        if leader is None:
            return Disciple.objects.none()
        return Disciple.objects.filter(leader=leader)

    def get_serializer_class(self):
        if self.action == 'list':
            return DiscipleListSerializer
        return DiscipleSerializer

    def perform_create(self, serializer):
        serializer.save(leader=get_leader(self.request.user))


class LeaderProfileViewSet(viewsets.ViewSet):
    """The signed-in leader's own profile."""

    permission_classes = [IsAuthenticated, IsLeader]

    def list(self, request):
        serializer = LeaderSerializer(get_leader(request.user))
        return Response(serializer.data)

    @action(detail=False, methods=['patch'])
    def update_profile(self, request):
        leader = get_leader(request.user)
        serializer = LeaderSerializer(leader, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
