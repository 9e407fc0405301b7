"""Read-side progress computation for the leader dashboard and the disciple's own plans."""
from decimal import Decimal, ROUND_HALF_UP

from django.core.exceptions import ObjectDoesNotExist

from apps.core.constants import (
    DiscipleStatus, PlanProgressStatus, ProgressStatus, Tables,
)
from apps.core.exceptions import DataIntegrityError, NotFoundError
from apps.core.validators import validate_choice
from .persistence import DjangoPersistence


def progress_percentage(completed, total):
    """
    round(100 * completed / total), half-up; 0 for an empty group.

    Partial groups never report 0 or 100 so the derived status stays exact.
    This clamp departs from plain rounding: 199 of 200 reports 99, not 100.
    """
    if total <= 0:
        return 0
    if completed < 0 or completed > total:
        raise DataIntegrityError(
            f'Contagem inconsistente: {completed} etapa(s) concluída(s) de {total}.'
        )
    value = Decimal(completed * 100) / Decimal(total)
    percentage = int(value.quantize(Decimal('1'), rounding=ROUND_HALF_UP))
    # 100 only when every stage is done, 0 only when none is
    if percentage == 100 and completed < total:
        return 99
    if percentage == 0 and completed > 0:
        return 1
    return percentage


def derive_status(percentage):
    """Coarse plan status: a pure function of the completion percentage."""
    if percentage == 100:
        return PlanProgressStatus.COMPLETED
    if percentage == 0:
        return PlanProgressStatus.NOT_STARTED
    return PlanProgressStatus.IN_PROGRESS


def _related(record, name):
    try:
        value = getattr(record, name)
    except ObjectDoesNotExist:
        value = None
    if value is None:
        raise DataIntegrityError(
            f'Registro de progresso {record.pk} sem {name} associado.',
            details={'record': str(record.pk), 'missing': name},
        )
    return value


def sort_by_stage_order(records):
    """Stable sort on stage order: records sharing an order keep their relative position."""
    return sorted(records, key=lambda record: _related(record, 'stage').order)


def _stage_entry(record):
    stage = record.stage
    return {
        'record_id': record.pk,
        'stage_id': stage.pk,
        'name': stage.name,
        'order': stage.order,
        'description': stage.description,
        'key_verses': stage.key_verses,
        'suggested_activities': stage.suggested_activities,
        'estimated_days': stage.estimated_days,
        'status': record.status,
        'started_at': record.started_at,
        'completed_at': record.completed_at,
        'observations': record.observations,
        'version': record.version,
    }


def compute_progress(records):
    """
    Group stage-joined progress records by plan and summarize each group.

    Every record must carry its stage and plan; a missing relation, or a
    stage that belongs to another plan, raises DataIntegrityError. Returns
    one dict per plan, ordered by plan name.
    """
    groups = {}
    for record in records:
        plan = _related(record, 'plan')
        stage = _related(record, 'stage')
        if stage.plan_id != record.plan_id:
            raise DataIntegrityError(
                f'A etapa {stage.pk} não pertence ao plano {record.plan_id}.',
                details={'record': str(record.pk)},
            )
        groups.setdefault(record.plan_id, (plan, []))[1].append(record)

    results = []
    for plan_id, (plan, group) in groups.items():
        ordered = sort_by_stage_order(group)
        total = len(ordered)
        completed = sum(1 for record in ordered if record.status == ProgressStatus.COMPLETED)
        percentage = progress_percentage(completed, total)

        start_dates = [record.started_at for record in ordered if record.started_at]
        start_date = min(start_dates) if start_dates else None
        updates = [record.updated_at for record in ordered if record.updated_at]

        results.append({
            'plan_id': plan_id,
            'plan_name': plan.name,
            'maturity_level': plan.maturity_level,
            'total_stages': total,
            'completed_stages': completed,
            'progress_percentage': percentage,
            'status': derive_status(percentage),
            'start_date': start_date,
            'last_activity': max(updates) if updates else start_date,
            'stages': [_stage_entry(record) for record in ordered],
        })

    results.sort(key=lambda result: (result['plan_name'], str(result['plan_id'])))
    return results


class ProgressAggregator:
    """Builds the leader dashboard and the disciple's "my plans" view."""

    RELATED = ('plan', 'stage')
    ORDER_BY = ['stage__order', 'stage__created_at']

    def __init__(self, persistence=None):
        self.db = persistence or DjangoPersistence()

    def leader_dashboard(self, leader, status=None):
        """
        Per-plan progress of every active disciple of the leader that has progress.

        With ``status``, only disciples with at least one plan in that derived
        status are kept (all of their plans are still listed).
        """
        if status:
            validate_choice(status, PlanProgressStatus.VALUES, 'status', 'Status')

        disciples = self.db.query_rows(
            Tables.DISCIPLES,
            {'leader': leader, 'status': DiscipleStatus.ACTIVE},
            order_by=['name'],
        )
        if not disciples:
            return []

        records = self.db.query_rows(
            Tables.PROGRESS,
            {'disciple__in': [disciple.pk for disciple in disciples]},
            related=self.RELATED,
            order_by=self.ORDER_BY,
        )
        by_disciple = {}
        for record in records:
            by_disciple.setdefault(record.disciple_id, []).append(record)

        entries = []
        for disciple in disciples:
            plans = compute_progress(by_disciple.get(disciple.pk, []))
            if not plans:
                continue
            entries.append({
                'disciple_id': disciple.pk,
                'name': disciple.name,
                'plans': plans,
            })
        return self.filter_by_status(entries, status)

    @staticmethod
    def filter_by_status(entries, status=None):
        """Keep disciples with at least one plan in the given derived status."""
        if not status:
            return entries
        validate_choice(status, PlanProgressStatus.VALUES, 'status', 'Status')
        return [
            entry for entry in entries
            if any(plan['status'] == status for plan in entry['plans'])
        ]

    @staticmethod
    def dashboard_summary(entries):
        """Totals shown above the leader dashboard."""
        plans = [plan for entry in entries for plan in entry['plans']]
        return {
            'total_disciples': len(entries),
            'total_plans': len(plans),
            'plans_in_progress': sum(
                1 for plan in plans if plan['status'] == PlanProgressStatus.IN_PROGRESS
            ),
            'plans_completed': sum(
                1 for plan in plans if plan['status'] == PlanProgressStatus.COMPLETED
            ),
        }

    def disciple_plans(self, user):
        """The signed-in disciple's plans with their stages in order."""
        disciple = getattr(user, 'disciple_profile', None)
        if disciple is None:
            raise NotFoundError('Disciple')

        records = self.db.query_rows(
            Tables.PROGRESS,
            {'disciple': disciple},
            related=self.RELATED,
            order_by=self.ORDER_BY,
        )
        return compute_progress(records)
