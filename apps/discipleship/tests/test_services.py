"""Tests for discipleship services - catalog and progress ledger."""
from unittest.mock import patch

import pytest
from django.db import OperationalError
from django.db.models import F
from django.test import override_settings

from apps.communication.models import Alert
from apps.core.constants import AlertType, MaturityLevel, ProgressStatus
from apps.core.exceptions import (
    BackendUnavailableError, ConflictError, NotFoundError, ValidationError,
)
from apps.discipleship.models import Plan, Stage, ProgressRecord
from apps.discipleship.persistence import DjangoPersistence
from apps.discipleship.services import PlanCatalogService, ProgressLedgerService
from apps.members.tests.factories import (
    DiscipleFactory,
    DiscipleWithUserFactory,
    LeaderFactory,
    UserFactory,
)

from .factories import PlanFactory, ProgressRecordFactory, StageFactory


@pytest.fixture
def catalog():
    return PlanCatalogService()


@pytest.fixture
def ledger():
    return ProgressLedgerService(first_stage_in_progress=False)


@pytest.fixture
def plan_with_stages():
    plan = PlanFactory(name='Fundamentos')
    for order in (1, 2, 3, 4):
        StageFactory(plan=plan, order=order)
    return plan


# ---------------------------------------------------------------------------
# Plan catalog
# ---------------------------------------------------------------------------
@pytest.mark.django_db
class TestCreatePlan:

    def test_creates_plan_for_leader(self, catalog):
        leader = LeaderFactory()
        plan = catalog.create_plan(
            leader, '  Fundamentos da Fé ', maturity_level=MaturityLevel.INTERMEDIATE,
            estimated_days='30',
        )
        assert plan.leader == leader
        assert plan.name == 'Fundamentos da Fé'
        assert plan.estimated_days == 30
        assert plan.is_active is True

    def test_name_is_required(self, catalog):
        with pytest.raises(ValidationError) as exc_info:
            catalog.create_plan(LeaderFactory(), '   ')
        assert 'name' in exc_info.value.details

    def test_rejects_unknown_maturity_level(self, catalog):
        with pytest.raises(ValidationError):
            catalog.create_plan(LeaderFactory(), 'Plano', maturity_level='Expert')

    @pytest.mark.parametrize('value', [-1, 'abc', 2.5, True, '-3'])
    def test_rejects_invalid_estimated_days(self, catalog, value):
        with pytest.raises(ValidationError) as exc_info:
            catalog.create_plan(LeaderFactory(), 'Plano', estimated_days=value)
        assert 'estimated_days' in exc_info.value.details


@pytest.mark.django_db
class TestUpdatePlan:

    def test_updates_fields(self, catalog):
        plan = PlanFactory()
        updated = catalog.update_plan(
            plan.leader, plan.pk, name='Novo nome', is_active=False,
        )
        assert updated.name == 'Novo nome'
        assert updated.is_active is False

    def test_other_leader_gets_not_found(self, catalog):
        plan = PlanFactory()
        with pytest.raises(NotFoundError):
            catalog.update_plan(LeaderFactory(), plan.pk, name='Invasão')
        plan.refresh_from_db()
        assert plan.name != 'Invasão'

    def test_rejects_unknown_fields(self, catalog):
        plan = PlanFactory()
        with pytest.raises(ValidationError):
            catalog.update_plan(plan.leader, plan.pk, leader=LeaderFactory())

    def test_malformed_id_is_not_found(self, catalog):
        with pytest.raises(NotFoundError):
            catalog.get_plan(LeaderFactory(), 'not-a-uuid')


@pytest.mark.django_db
class TestListPlans:

    def test_only_own_plans(self, catalog):
        leader = LeaderFactory()
        PlanFactory.create_batch(2, leader=leader)
        PlanFactory()
        assert len(catalog.list_plans(leader)) == 2


@pytest.mark.django_db
class TestDeletePlan:

    def test_deletes_plan_and_stages(self, catalog, plan_with_stages):
        catalog.delete_plan(plan_with_stages.leader, plan_with_stages.pk)
        assert not Plan.objects.filter(pk=plan_with_stages.pk).exists()
        assert not Stage.objects.filter(plan_id=plan_with_stages.pk).exists()

    def test_blocked_by_progress_records(self, catalog, plan_with_stages):
        ProgressRecordFactory(stage=plan_with_stages.stages.first())
        with pytest.raises(ConflictError):
            catalog.delete_plan(plan_with_stages.leader, plan_with_stages.pk)
        assert Plan.objects.filter(pk=plan_with_stages.pk).exists()

    def test_cascade_removes_progress_records(self, catalog, plan_with_stages):
        ProgressRecordFactory(stage=plan_with_stages.stages.first())
        catalog.delete_plan(plan_with_stages.leader, plan_with_stages.pk, cascade=True)
        assert not Plan.objects.filter(pk=plan_with_stages.pk).exists()
        assert not ProgressRecord.objects.filter(plan_id=plan_with_stages.pk).exists()

    @override_settings(DISCIPLESHIP_CASCADE_DELETES=True)
    def test_cascade_default_from_settings(self, catalog, plan_with_stages):
        ProgressRecordFactory(stage=plan_with_stages.stages.first())
        catalog.delete_plan(plan_with_stages.leader, plan_with_stages.pk)
        assert not Plan.objects.filter(pk=plan_with_stages.pk).exists()


@pytest.mark.django_db
class TestStages:

    def test_add_stage(self, catalog):
        plan = PlanFactory()
        stage = catalog.add_stage(
            plan.leader, plan.pk, 'Oração', '1', key_verses='Mateus 6:9',
        )
        assert stage.plan == plan
        assert stage.order == 1
        assert stage.key_verses == 'Mateus 6:9'

    @pytest.mark.parametrize('order', [None, -1, 'primeira'])
    def test_add_stage_rejects_invalid_order(self, catalog, order):
        plan = PlanFactory()
        with pytest.raises(ValidationError):
            catalog.add_stage(plan.leader, plan.pk, 'Oração', order)

    def test_add_stage_to_foreign_plan(self, catalog):
        plan = PlanFactory()
        with pytest.raises(NotFoundError):
            catalog.add_stage(LeaderFactory(), plan.pk, 'Oração', 1)

    def test_duplicate_order_is_accepted_and_logged(self, catalog):
        plan = PlanFactory()
        catalog.add_stage(plan.leader, plan.pk, 'Primeira', 1)
        with patch('apps.discipleship.services.logger') as mock_logger:
            catalog.add_stage(plan.leader, plan.pk, 'Segunda', 1)
        mock_logger.warning.assert_called_once()
        assert catalog.order_collisions(plan.pk) == [1]

    def test_list_stages_ties_keep_creation_order(self, catalog):
        plan = PlanFactory()
        catalog.add_stage(plan.leader, plan.pk, 'B', 2)
        catalog.add_stage(plan.leader, plan.pk, 'C', 2)
        catalog.add_stage(plan.leader, plan.pk, 'A', 1)
        assert [s.name for s in catalog.list_stages(plan.pk)] == ['A', 'B', 'C']

    def test_update_stage(self, catalog):
        stage = StageFactory(order=1)
        updated = catalog.update_stage(stage.plan.leader, stage.pk, order=5, name='Renomeada')
        assert updated.order == 5
        assert updated.name == 'Renomeada'

    def test_update_stage_rejects_unknown_fields(self, catalog):
        stage = StageFactory()
        plan_id = stage.plan_id
        with pytest.raises(ValidationError):
            catalog.update_stage(stage.plan.leader, stage.pk, plan=PlanFactory())
        stage.refresh_from_db()
        assert stage.plan_id == plan_id

    def test_delete_stage_blocked_by_progress(self, catalog):
        record = ProgressRecordFactory()
        with pytest.raises(ConflictError):
            catalog.delete_stage(record.leader, record.stage_id)
        assert Stage.objects.filter(pk=record.stage_id).exists()

    def test_delete_stage_with_cascade(self, catalog):
        record = ProgressRecordFactory()
        catalog.delete_stage(record.leader, record.stage_id, cascade=True)
        assert not Stage.objects.filter(pk=record.stage_id).exists()
        assert not ProgressRecord.objects.filter(pk=record.pk).exists()


# ---------------------------------------------------------------------------
# Progress ledger
# ---------------------------------------------------------------------------
@pytest.mark.django_db
class TestAssignPlan:

    def test_creates_one_record_per_stage(self, ledger, plan_with_stages):
        disciple = DiscipleFactory(leader=plan_with_stages.leader)

        created = ledger.assign_plan(plan_with_stages.leader, disciple.pk, plan_with_stages.pk)

        assert len(created) == 4
        assert {r.stage_id for r in created} == set(
            plan_with_stages.stages.values_list('pk', flat=True)
        )
        assert all(r.status == ProgressStatus.PENDING for r in created)
        assert all(r.started_at is not None for r in created)
        assert all(r.leader == plan_with_stages.leader for r in created)

    def test_first_stage_in_progress_option(self, plan_with_stages):
        disciple = DiscipleFactory(leader=plan_with_stages.leader)
        ledger = ProgressLedgerService(first_stage_in_progress=True)

        ledger.assign_plan(plan_with_stages.leader, disciple.pk, plan_with_stages.pk)

        statuses = list(
            ProgressRecord.objects.filter(disciple=disciple)
            .order_by('stage__order').values_list('status', flat=True)
        )
        assert statuses == [ProgressStatus.IN_PROGRESS] + [ProgressStatus.PENDING] * 3

    def test_reassign_is_idempotent_and_backfills(self, ledger, plan_with_stages):
        leader = plan_with_stages.leader
        disciple = DiscipleFactory(leader=leader)
        ledger.assign_plan(leader, disciple.pk, plan_with_stages.pk)

        assert ledger.assign_plan(leader, disciple.pk, plan_with_stages.pk) == []

        StageFactory(plan=plan_with_stages, order=5)
        backfilled = ledger.assign_plan(leader, disciple.pk, plan_with_stages.pk)

        assert len(backfilled) == 1
        assert ProgressRecord.objects.filter(disciple=disciple).count() == 5

    def test_plan_without_stages(self, ledger):
        plan = PlanFactory()
        disciple = DiscipleFactory(leader=plan.leader)
        with pytest.raises(ValidationError):
            ledger.assign_plan(plan.leader, disciple.pk, plan.pk)

    def test_foreign_disciple(self, ledger, plan_with_stages):
        with pytest.raises(NotFoundError):
            ledger.assign_plan(plan_with_stages.leader, DiscipleFactory().pk, plan_with_stages.pk)

    def test_foreign_plan(self, ledger, plan_with_stages):
        leader = LeaderFactory()
        disciple = DiscipleFactory(leader=leader)
        with pytest.raises(NotFoundError):
            ledger.assign_plan(leader, disciple.pk, plan_with_stages.pk)

    def test_partial_failure_leaves_nothing_behind(self, ledger, plan_with_stages):
        disciple = DiscipleFactory(leader=plan_with_stages.leader)
        real_create = ProgressRecord.objects.create
        calls = []

        def flaky_create(**kwargs):
            calls.append(kwargs)
            if len(calls) == 3:
                raise OperationalError('connection lost')
            return real_create(**kwargs)

        with patch.object(ProgressRecord.objects, 'create', side_effect=flaky_create):
            with pytest.raises(BackendUnavailableError):
                ledger.assign_plan(plan_with_stages.leader, disciple.pk, plan_with_stages.pk)

        assert not ProgressRecord.objects.filter(disciple=disciple).exists()

    def test_concurrent_assignment_is_conflict(self, ledger, plan_with_stages):
        leader = plan_with_stages.leader
        disciple = DiscipleFactory(leader=leader)
        first_stage = plan_with_stages.stages.order_by('order').first()

        class RacingPersistence(DjangoPersistence):
            def insert_rows(self, table, rows):
                ProgressRecord.objects.create(
                    leader=leader, disciple=disciple, plan=plan_with_stages, stage=first_stage,
                )
                return super().insert_rows(table, rows)

        racing = ProgressLedgerService(persistence=RacingPersistence(), first_stage_in_progress=False)
        with pytest.raises(ConflictError):
            racing.assign_plan(leader, disciple.pk, plan_with_stages.pk)
        assert not ProgressRecord.objects.filter(disciple=disciple).exists()

        created = ledger.assign_plan(leader, disciple.pk, plan_with_stages.pk)
        assert len(created) == 4


@pytest.mark.django_db
class TestMarkStageComplete:

    def test_disciple_completes_own_stage(self, ledger):
        disciple = DiscipleWithUserFactory()
        plan = PlanFactory(leader=disciple.leader)
        first = ProgressRecordFactory(stage=StageFactory(plan=plan, order=1), disciple=disciple)
        second = ProgressRecordFactory(stage=StageFactory(plan=plan, order=2), disciple=disciple)

        record = ledger.mark_stage_complete(disciple.user, first.pk)

        assert record.status == ProgressStatus.COMPLETED
        assert record.completed_at is not None
        assert record.started_at is not None
        assert record.version == 2
        second.refresh_from_db()
        assert second.status == ProgressStatus.PENDING
        assert second.version == 1

    def test_leader_completes_stage(self, ledger):
        record = ProgressRecordFactory()
        result = ledger.mark_stage_complete(record.leader.user, record.pk)
        assert result.status == ProgressStatus.COMPLETED

    def test_stranger_gets_not_found(self, ledger):
        record = ProgressRecordFactory()
        with pytest.raises(NotFoundError):
            ledger.mark_stage_complete(UserFactory(), record.pk)
        with pytest.raises(NotFoundError):
            ledger.mark_stage_complete(LeaderFactory().user, record.pk)

    def test_already_completed_is_unchanged(self, ledger):
        record = ProgressRecordFactory(status=ProgressStatus.COMPLETED)
        result = ledger.mark_stage_complete(record.leader.user, record.pk)
        assert result.version == record.version

    def test_stale_version_conflicts(self, ledger):
        record = ProgressRecordFactory()
        ledger.start_stage(record.leader.user, record.pk)
        with pytest.raises(ConflictError):
            ledger.mark_stage_complete(record.leader.user, record.pk, expected_version=1)
        record.refresh_from_db()
        assert record.status == ProgressStatus.IN_PROGRESS

    def test_matching_version_as_string(self, ledger):
        record = ProgressRecordFactory()
        result = ledger.mark_stage_complete(record.leader.user, record.pk, expected_version='1')
        assert result.version == 2

    def test_concurrent_writer_wins_race(self):
        record = ProgressRecordFactory()

        class RacingPersistence(DjangoPersistence):
            def update_rows(self, table, filters, patch):
                ProgressRecord.objects.filter(pk=record.pk).update(version=F('version') + 1)
                return super().update_rows(table, filters, patch)

        ledger = ProgressLedgerService(persistence=RacingPersistence())
        with pytest.raises(ConflictError):
            ledger.mark_stage_complete(record.leader.user, record.pk)
        record.refresh_from_db()
        assert record.status == ProgressStatus.PENDING


@pytest.mark.django_db
class TestTransitions:

    def test_start_stage(self, ledger):
        record = ProgressRecordFactory()
        result = ledger.start_stage(record.leader.user, record.pk)
        assert result.status == ProgressStatus.IN_PROGRESS
        assert result.started_at is not None

    def test_cannot_restart_completed_stage(self, ledger):
        record = ProgressRecordFactory(status=ProgressStatus.COMPLETED)
        with pytest.raises(ValidationError):
            ledger.start_stage(record.leader.user, record.pk)

    def test_cannot_move_back_to_pending(self, ledger):
        record = ProgressRecordFactory(status=ProgressStatus.IN_PROGRESS)
        with pytest.raises(ValidationError):
            ledger.update_status(record.leader.user, record.pk, ProgressStatus.PENDING)

    def test_update_status_rejects_unknown(self, ledger):
        record = ProgressRecordFactory()
        with pytest.raises(ValidationError):
            ledger.update_status(record.leader.user, record.pk, 'Pausado')

    def test_update_observations(self, ledger):
        record = ProgressRecordFactory()
        result = ledger.update_observations(record.leader.user, record.pk, 'Muito dedicado.')
        assert result.observations == 'Muito dedicado.'
        assert result.version == 2


@pytest.mark.django_db
class TestListRecords:

    def test_leader_sees_own_records(self, ledger):
        record = ProgressRecordFactory()
        ProgressRecordFactory()
        assert [r.pk for r in ledger.list_records(record.leader.user)] == [record.pk]

    def test_disciple_sees_own_records(self, ledger):
        disciple = DiscipleWithUserFactory()
        plan = PlanFactory(leader=disciple.leader)
        own = ProgressRecordFactory(stage=StageFactory(plan=plan), disciple=disciple)
        ProgressRecordFactory(stage=StageFactory(plan=plan))
        assert [r.pk for r in ledger.list_records(disciple.user)] == [own.pk]

    def test_filter_by_plan(self, ledger):
        record = ProgressRecordFactory()
        other_plan = PlanFactory(leader=record.leader)
        ProgressRecordFactory(stage=StageFactory(plan=other_plan), disciple=record.disciple)
        records = ledger.list_records(record.leader.user, plan_id=record.plan_id)
        assert [r.pk for r in records] == [record.pk]

    def test_user_without_profile(self, ledger):
        assert ledger.list_records(UserFactory()) == []


@pytest.mark.django_db
class TestRequestPlanRemoval:

    def test_alert_goes_to_owning_leader(self, ledger):
        disciple = DiscipleWithUserFactory()
        record = ProgressRecordFactory(
            stage=StageFactory(plan=PlanFactory(leader=disciple.leader)), disciple=disciple,
        )

        alert = ledger.request_plan_removal(disciple.user, record.plan_id, reason='Mudança de cidade')

        assert alert.leader == disciple.leader
        assert alert.disciple == disciple
        assert alert.alert_type == AlertType.PLAN_REMOVAL_REQUEST
        assert 'Mudança de cidade' in alert.message
        assert Alert.objects.filter(leader=disciple.leader).count() == 1

    def test_plan_not_assigned(self, ledger):
        disciple = DiscipleWithUserFactory()
        with pytest.raises(NotFoundError):
            ledger.request_plan_removal(disciple.user, PlanFactory(leader=disciple.leader).pk)

    def test_requires_disciple_profile(self, ledger):
        with pytest.raises(NotFoundError):
            ledger.request_plan_removal(UserFactory(), PlanFactory().pk)
