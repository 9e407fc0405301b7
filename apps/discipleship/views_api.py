"""
API views for discipleship plans, progress records and dashboards.

Views parse input and render output; ownership, validation and
concurrency rules are enforced by the services and surface as
``ServiceError`` subclasses mapped by ``apps.core.handlers``.
"""
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.communication.serializers import AlertSerializer
from apps.core.exceptions import ValidationError
from apps.core.permissions import IsDisciple, IsLeader, IsLeaderOrDisciple, get_leader
from .models import Plan, Stage, ProgressRecord
from .progress import ProgressAggregator
from .serializers import (
    PlanSerializer,
    PlanDetailSerializer,
    PlanInputSerializer,
    StageSerializer,
    StageInputSerializer,
    ProgressRecordSerializer,
    AssignPlanSerializer,
    VersionSerializer,
    ObservationsSerializer,
    StatusSerializer,
    RemovalRequestSerializer,
)
from .services import PlanCatalogService, ProgressLedgerService


def parse_cascade(request):
    """``?cascade=`` as a bool, or None to fall back to the configured policy."""
    value = request.query_params.get('cascade')
    if value is None or value == '':
        return None
    return value.lower() in ('1', 'true', 'yes', 'on')


def parse_input(serializer_class, request):
    """Validated input, or a 422 carrying the serializer errors."""
    serializer = serializer_class(data=request.data)
    if not serializer.is_valid():
        raise ValidationError('Dados inválidos.', details=serializer.errors)
    return serializer.validated_data


class PlanViewSet(viewsets.GenericViewSet):
    """The signed-in leader's plan catalog."""
    serializer_class = PlanSerializer
    permission_classes = [IsAuthenticated, IsLeader]
    filter_backends = []

    def get_queryset(self):
        leader = get_leader(self.request.user)
        if leader is None:
            return Plan.objects.none()
        return Plan.objects.filter(leader=leader)

    def get_catalog(self):
        return PlanCatalogService()

    def list(self, request):
        plans = self.get_catalog().list_plans(get_leader(request.user))
        page = self.paginate_queryset(plans)
        if page is not None:
            return self.get_paginated_response(PlanSerializer(page, many=True).data)
        return Response(PlanSerializer(plans, many=True).data)

    def create(self, request):
        data = parse_input(PlanInputSerializer, request)
        data.pop('is_active', None)
        plan = self.get_catalog().create_plan(
            get_leader(request.user), name=data.pop('name', None), **data
        )
        return Response(PlanDetailSerializer(plan).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        plan = self.get_catalog().get_plan(get_leader(request.user), pk)
        return Response(PlanDetailSerializer(plan).data)

    def update(self, request, pk=None):
        data = parse_input(PlanInputSerializer, request)
        plan = self.get_catalog().update_plan(get_leader(request.user), pk, **data)
        return Response(PlanDetailSerializer(plan).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        self.get_catalog().delete_plan(get_leader(request.user), pk, cascade=parse_cascade(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['get', 'post'])
    def stages(self, request, pk=None):
        """List the plan's stages, or append one (duplicate orders come back as warnings)."""
        catalog = self.get_catalog()
        leader = get_leader(request.user)

        if request.method == 'GET':
            plan = catalog.get_plan(leader, pk)
            return Response(StageSerializer(catalog.list_stages(plan.pk), many=True).data)

        data = parse_input(StageInputSerializer, request)
        stage = catalog.add_stage(
            leader, pk, name=data.pop('name', None), order=data.pop('order', None), **data
        )
        warnings = []
        if stage.order in catalog.order_collisions(stage.plan_id):
            warnings.append(f'Já existe outra etapa com a ordem {stage.order} neste plano.')
        return Response(
            {'stage': StageSerializer(stage).data, 'warnings': warnings},
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=['post'])
    def assign(self, request, pk=None):
        """Assign the plan to one of the leader's disciples."""
        data = parse_input(AssignPlanSerializer, request)
        created = ProgressLedgerService().assign_plan(
            get_leader(request.user), data['disciple'], pk
        )
        return Response(
            {
                'created': len(created),
                'records': ProgressRecordSerializer(created, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )


class StageViewSet(viewsets.GenericViewSet):
    """Single stages of the leader's plans."""
    serializer_class = StageSerializer
    permission_classes = [IsAuthenticated, IsLeader]
    filter_backends = []

    def get_queryset(self):
        leader = get_leader(self.request.user)
        if leader is None:
            return Stage.objects.none()
        return Stage.objects.filter(plan__leader=leader)

    def retrieve(self, request, pk=None):
        stage = PlanCatalogService().get_stage(get_leader(request.user), pk)
        return Response(StageSerializer(stage).data)

    def update(self, request, pk=None):
        data = parse_input(StageInputSerializer, request)
        stage = PlanCatalogService().update_stage(get_leader(request.user), pk, **data)
        return Response(StageSerializer(stage).data)

    def partial_update(self, request, pk=None):
        return self.update(request, pk)

    def destroy(self, request, pk=None):
        PlanCatalogService().delete_stage(
            get_leader(request.user), pk, cascade=parse_cascade(request)
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class ProgressRecordViewSet(viewsets.GenericViewSet):
    """
    Progress records seen by their leader or by the assigned disciple.

    Transitions accept an optional ``version``; a stale one answers 409.
    """
    serializer_class = ProgressRecordSerializer
    permission_classes = [IsAuthenticated, IsLeaderOrDisciple]
    filter_backends = []

    def get_queryset(self):
        return ProgressRecord.objects.none()

    def get_ledger(self):
        return ProgressLedgerService()

    def list(self, request):
        records = self.get_ledger().list_records(
            request.user,
            disciple_id=request.query_params.get('disciple') or None,
            plan_id=request.query_params.get('plan') or None,
        )
        page = self.paginate_queryset(records)
        if page is not None:
            return self.get_paginated_response(ProgressRecordSerializer(page, many=True).data)
        return Response(ProgressRecordSerializer(records, many=True).data)

    def retrieve(self, request, pk=None):
        record = self.get_ledger().get_record(request.user, pk)
        return Response(ProgressRecordSerializer(record).data)

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        data = parse_input(VersionSerializer, request)
        record = self.get_ledger().mark_stage_complete(request.user, pk, data.get('version'))
        return Response(ProgressRecordSerializer(record).data)

    @action(detail=True, methods=['post'])
    def start(self, request, pk=None):
        data = parse_input(VersionSerializer, request)
        record = self.get_ledger().start_stage(request.user, pk, data.get('version'))
        return Response(ProgressRecordSerializer(record).data)

    @action(detail=True, methods=['post'])
    def observations(self, request, pk=None):
        data = parse_input(ObservationsSerializer, request)
        record = self.get_ledger().update_observations(
            request.user, pk, data['observations'], data.get('version')
        )
        return Response(ProgressRecordSerializer(record).data)

    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        """Forward-only status change; moving a record back answers 422."""
        data = parse_input(StatusSerializer, request)
        record = self.get_ledger().update_status(
            request.user, pk, data['status'], data.get('version')
        )
        return Response(ProgressRecordSerializer(record).data)


class DashboardView(viewsets.ViewSet):
    """Leader dashboard: per-disciple plan progress with totals."""
    permission_classes = [IsAuthenticated, IsLeader]

    def list(self, request):
        aggregator = ProgressAggregator()
        entries = aggregator.leader_dashboard(
            get_leader(request.user), status=request.query_params.get('status') or None
        )
        return Response({
            'summary': aggregator.dashboard_summary(entries),
            'disciples': entries,
        })


class MyPlansView(viewsets.ViewSet):
    """The signed-in disciple's plans."""
    permission_classes = [IsAuthenticated, IsDisciple]

    def list(self, request):
        return Response(ProgressAggregator().disciple_plans(request.user))

    @action(detail=False, methods=['post'], url_path='request-removal')
    def request_removal(self, request):
        """Ask the leader to remove one of the disciple's plans."""
        data = parse_input(RemovalRequestSerializer, request)
        alert = ProgressLedgerService().request_plan_removal(
            request.user, data['plan'], data.get('reason', '')
        )
        return Response(AlertSerializer(alert).data, status=status.HTTP_201_CREATED)
