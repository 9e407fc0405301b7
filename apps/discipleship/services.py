"""Business logic for discipleship plans, their stages, and per-disciple progress."""
import logging
from collections import Counter

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError
from django.utils import timezone

from apps.core.constants import AlertType, MaturityLevel, ProgressStatus, Tables
from apps.core.exceptions import ConflictError, NotFoundError, ValidationError
from apps.core.validators import (
    validate_choice, validate_non_negative_int, validate_required_text,
)
from .persistence import DjangoPersistence

logger = logging.getLogger(__name__)


def fetch_one(db, table, resource, resource_id, filters=None, related=()):
    """Return the single row with this id (and filters) or raise NotFoundError."""
    try:
        rows = db.query_rows(table, {'pk': resource_id, **(filters or {})}, related=related)
    except DjangoValidationError:
        # Malformed UUID: indistinguishable from a missing row for the caller
        rows = []
    if not rows:
        raise NotFoundError(resource, resource_id)
    return rows[0]


class PlanCatalogService:
    """Manages plan templates and their ordered stages for a leader."""

    PLAN_FIELDS = {'name', 'description', 'maturity_level', 'estimated_days', 'is_active'}
    STAGE_FIELDS = {
        'name', 'description', 'order', 'estimated_days',
        'suggested_activities', 'key_verses', 'required_resources',
    }

    def __init__(self, persistence=None):
        self.db = persistence or DjangoPersistence()

    # ─── Plans ────────────────────────────────────────────────────────────

    def create_plan(self, leader, name, description='', maturity_level=MaturityLevel.BEGINNER,
                    estimated_days=None):
        """Create a plan owned by ``leader``."""
        row = self._clean_plan_fields({
            'name': name,
            'description': description,
            'maturity_level': maturity_level,
            'estimated_days': estimated_days,
        })
        row['leader'] = leader

        [plan] = self.db.insert_rows(Tables.PLANS, [row])
        logger.info(f'Plan "{plan.name}" created by leader {leader.pk}')
        return plan

    def get_plan(self, leader, plan_id):
        return fetch_one(self.db, Tables.PLANS, 'Plan', plan_id, {'leader': leader})

    def list_plans(self, leader):
        """The leader's plans, newest first."""
        return self.db.query_rows(Tables.PLANS, {'leader': leader}, order_by=['-created_at'])

    def update_plan(self, leader, plan_id, /, **changes):
        """Edit a plan; only its owner may do so."""
        plan = self.get_plan(leader, plan_id)
        patch = self._clean_plan_fields(changes, partial=True)
        if not patch:
            return plan
        [plan] = self.db.update_rows(Tables.PLANS, {'pk': plan.pk}, patch)
        return plan

    def delete_plan(self, leader, plan_id, cascade=None):
        """
        Delete a plan and its stages.

        Progress records referencing the plan block the deletion unless
        ``cascade`` (or the DISCIPLESHIP_CASCADE_DELETES setting) allows
        removing them too.
        """
        plan = self.get_plan(leader, plan_id)
        if cascade is None:
            cascade = getattr(settings, 'DISCIPLESHIP_CASCADE_DELETES', False)

        with self.db.atomic():
            records = self.db.query_rows(Tables.PROGRESS, {'plan': plan})
            if records and not cascade:
                raise ConflictError(
                    f'O plano "{plan.name}" possui {len(records)} registro(s) de progresso.',
                    details={'progress_records': len(records)},
                )
            if records:
                self.db.delete_rows(Tables.PROGRESS, {'plan': plan})
            self.db.delete_rows(Tables.STAGES, {'plan': plan})
            self.db.delete_rows(Tables.PLANS, {'pk': plan.pk})

        logger.info(
            f'Plan {plan.pk} deleted by leader {leader.pk} '
            f'({len(records)} progress record(s) removed)'
        )

    # ─── Stages ───────────────────────────────────────────────────────────

    def add_stage(self, leader, plan_id, name, order, description='', estimated_days=None,
                  suggested_activities='', key_verses='', required_resources=''):
        """
        Append a stage to a plan.

        Duplicate ``order`` values are accepted: they are logged and reported
        by ``order_collisions`` instead of being rejected.
        """
        plan = self.get_plan(leader, plan_id)
        row = self._clean_stage_fields({
            'name': name,
            'order': order,
            'description': description,
            'estimated_days': estimated_days,
            'suggested_activities': suggested_activities,
            'key_verses': key_verses,
            'required_resources': required_resources,
        })
        row['plan'] = plan

        [stage] = self.db.insert_rows(Tables.STAGES, [row])
        if stage.order in self.order_collisions(plan.pk):
            logger.warning(f'Plan {plan.pk} now has more than one stage with order {stage.order}')
        return stage

    def get_stage(self, leader, stage_id):
        return fetch_one(
            self.db, Tables.STAGES, 'Stage', stage_id,
            {'plan__leader': leader}, related=('plan',),
        )

    def list_stages(self, plan_id):
        """Stages of a plan by ascending order; ties keep creation order."""
        return self.db.query_rows(
            Tables.STAGES, {'plan_id': plan_id}, order_by=['order', 'created_at'],
        )

    def update_stage(self, leader, stage_id, /, **changes):
        stage = self.get_stage(leader, stage_id)
        patch = self._clean_stage_fields(changes, partial=True)
        if not patch:
            return stage
        [stage] = self.db.update_rows(Tables.STAGES, {'pk': stage.pk}, patch)
        if 'order' in patch and stage.order in self.order_collisions(stage.plan_id):
            logger.warning(f'Plan {stage.plan_id} now has more than one stage with order {stage.order}')
        return stage

    def delete_stage(self, leader, stage_id, cascade=None):
        """Delete a stage under the same cascade-or-block policy as ``delete_plan``."""
        stage = self.get_stage(leader, stage_id)
        if cascade is None:
            cascade = getattr(settings, 'DISCIPLESHIP_CASCADE_DELETES', False)

        with self.db.atomic():
            records = self.db.query_rows(Tables.PROGRESS, {'stage': stage})
            if records and not cascade:
                raise ConflictError(
                    f'A etapa "{stage.name}" possui {len(records)} registro(s) de progresso.',
                    details={'progress_records': len(records)},
                )
            if records:
                self.db.delete_rows(Tables.PROGRESS, {'stage': stage})
            self.db.delete_rows(Tables.STAGES, {'pk': stage.pk})

    def order_collisions(self, plan_id):
        """Order values shared by more than one stage of the plan, ascending."""
        counts = Counter(stage.order for stage in self.list_stages(plan_id))
        return sorted(order for order, count in counts.items() if count > 1)

    # ─── Validation ───────────────────────────────────────────────────────

    def _clean_plan_fields(self, data, partial=False):
        unknown = set(data) - self.PLAN_FIELDS
        if unknown:
            raise ValidationError(
                'Campos desconhecidos para o plano.',
                details={field: 'Campo desconhecido.' for field in sorted(unknown)},
            )

        cleaned = {}
        if not partial or 'name' in data:
            cleaned['name'] = validate_required_text(data.get('name'), 'name', 'O nome do plano')
        if 'description' in data:
            cleaned['description'] = data['description'] or ''
        if not partial or 'maturity_level' in data:
            cleaned['maturity_level'] = validate_choice(
                data.get('maturity_level', MaturityLevel.BEGINNER), MaturityLevel.VALUES,
                'maturity_level', 'Nível de maturidade',
            )
        if 'estimated_days' in data:
            cleaned['estimated_days'] = validate_non_negative_int(
                data['estimated_days'], 'estimated_days', 'A duração estimada',
            )
        if 'is_active' in data:
            cleaned['is_active'] = bool(data['is_active'])
        return cleaned

    def _clean_stage_fields(self, data, partial=False):
        unknown = set(data) - self.STAGE_FIELDS
        if unknown:
            raise ValidationError(
                'Campos desconhecidos para a etapa.',
                details={field: 'Campo desconhecido.' for field in sorted(unknown)},
            )

        cleaned = {}
        if not partial or 'name' in data:
            cleaned['name'] = validate_required_text(data.get('name'), 'name', 'O nome da etapa')
        if not partial or 'order' in data:
            cleaned['order'] = validate_non_negative_int(
                data.get('order'), 'order', 'A ordem', required=True,
            )
        if 'estimated_days' in data:
            cleaned['estimated_days'] = validate_non_negative_int(
                data['estimated_days'], 'estimated_days', 'A duração estimada',
            )
        for field in ('description', 'suggested_activities', 'key_verses', 'required_resources'):
            if field in data:
                cleaned[field] = data[field] or ''
        return cleaned


class ProgressLedgerService:
    """Creates and transitions the per-disciple, per-stage progress records."""

    RELATED = ('leader', 'disciple', 'plan', 'stage')

    def __init__(self, persistence=None, first_stage_in_progress=None):
        self.db = persistence or DjangoPersistence()
        if first_stage_in_progress is None:
            first_stage_in_progress = getattr(
                settings, 'DISCIPLESHIP_FIRST_STAGE_IN_PROGRESS', False
            )
        self.first_stage_in_progress = first_stage_in_progress

    def assign_plan(self, leader, disciple_id, plan_id):
        """
        Create one progress record per stage of the plan for the disciple.

        All-or-nothing. Stages that already have a record are skipped, so
        calling it again backfills stages added after the first assignment.
        Returns the records created by this call.
        """
        plan = fetch_one(self.db, Tables.PLANS, 'Plan', plan_id, {'leader': leader})
        disciple = fetch_one(self.db, Tables.DISCIPLES, 'Disciple', disciple_id, {'leader': leader})

        stages = self.db.query_rows(
            Tables.STAGES, {'plan': plan}, order_by=['order', 'created_at'],
        )
        if not stages:
            raise ValidationError(
                f'O plano "{plan.name}" não possui etapas.',
                details={'plan': 'Adicione etapas antes de atribuir o plano.'},
            )

        now = timezone.now()
        try:
            with self.db.atomic():
                existing = {
                    record.stage_id
                    for record in self.db.query_rows(
                        Tables.PROGRESS, {'disciple': disciple, 'plan': plan},
                    )
                }
                rows = []
                for index, stage in enumerate(stages):
                    if stage.pk in existing:
                        continue
                    status = ProgressStatus.PENDING
                    if self.first_stage_in_progress and not existing and index == 0:
                        status = ProgressStatus.IN_PROGRESS
                    rows.append({
                        'leader': leader,
                        'disciple': disciple,
                        'plan': plan,
                        'stage': stage,
                        'status': status,
                        'started_at': now,
                    })
                created = self.db.insert_rows(Tables.PROGRESS, rows) if rows else []
        except IntegrityError as e:
            # Another assignment of the same plan inserted first; nothing from this call is kept
            logger.warning(f'Concurrent assignment of plan {plan.pk} to disciple {disciple.pk}: {e}')
            raise ConflictError(
                'O plano está sendo atribuído a este discípulo em outra sessão. Tente novamente.',
                details={'plan': str(plan.pk), 'disciple': str(disciple.pk)},
            ) from e

        logger.info(
            f'Plan {plan.pk} assigned to disciple {disciple.pk}: '
            f'{len(created)} record(s) created, {len(existing)} already present'
        )
        return created

    def get_record(self, user, record_id):
        """
        Fetch a record the user may act on: its owning leader or the assigned disciple.
        """
        record = fetch_one(self.db, Tables.PROGRESS, 'ProgressRecord', record_id, related=self.RELATED)
        if not self._can_act(user, record):
            raise NotFoundError('ProgressRecord', record_id)
        return record

    def list_records(self, user, disciple_id=None, plan_id=None):
        """Records visible to the user, ordered by disciple, plan and stage order."""
        leader = getattr(user, 'leader_profile', None)
        disciple = getattr(user, 'disciple_profile', None)
        if leader is not None:
            filters = {'leader': leader}
        elif disciple is not None:
            filters = {'disciple': disciple}
        else:
            return []

        if disciple_id is not None:
            filters['disciple_id'] = disciple_id
        if plan_id is not None:
            filters['plan_id'] = plan_id
        try:
            return self.db.query_rows(
                Tables.PROGRESS, filters, related=self.RELATED,
                order_by=['disciple__name', 'plan__name', 'stage__order', 'stage__created_at'],
            )
        except DjangoValidationError:
            return []

    def mark_stage_complete(self, user, record_id, expected_version=None):
        """Move a record to "Concluído" and stamp its completion time; completed records are left as-is."""
        record = self.get_record(user, record_id)
        if record.status == ProgressStatus.COMPLETED:
            return record

        now = timezone.now()
        patch = {'status': ProgressStatus.COMPLETED, 'completed_at': now}
        if record.started_at is None:
            patch['started_at'] = now
        return self._write(record, patch, expected_version)

    def start_stage(self, user, record_id, expected_version=None):
        """Move a pending record to "Em Andamento"."""
        record = self.get_record(user, record_id)
        if record.status == ProgressStatus.IN_PROGRESS:
            return record
        self._check_forward(record, ProgressStatus.IN_PROGRESS)

        patch = {'status': ProgressStatus.IN_PROGRESS}
        if record.started_at is None:
            patch['started_at'] = timezone.now()
        return self._write(record, patch, expected_version)

    def update_status(self, user, record_id, status, expected_version=None):
        """Generic forward-only status change."""
        validate_choice(status, list(ProgressStatus.RANK), 'status', 'Status')
        if status == ProgressStatus.COMPLETED:
            return self.mark_stage_complete(user, record_id, expected_version)
        if status == ProgressStatus.IN_PROGRESS:
            return self.start_stage(user, record_id, expected_version)

        record = self.get_record(user, record_id)
        self._check_forward(record, status)
        return record

    def update_observations(self, user, record_id, observations, expected_version=None):
        record = self.get_record(user, record_id)
        return self._write(record, {'observations': observations or ''}, expected_version)

    def request_plan_removal(self, user, plan_id, reason=''):
        """
        Let a disciple ask their leader to drop an assigned plan.

        The alert goes to the leader that owns the disciple's progress records.
        """
        disciple = getattr(user, 'disciple_profile', None)
        if disciple is None:
            raise NotFoundError('Disciple')

        try:
            records = self.db.query_rows(
                Tables.PROGRESS, {'disciple': disciple, 'plan_id': plan_id}, related=('plan',),
            )
        except DjangoValidationError:
            records = []
        if not records:
            raise NotFoundError('Plan', plan_id)

        plan = records[0].plan
        message = f'{disciple.name} solicitou a remoção do plano "{plan.name}".'
        if reason:
            message += f' Motivo: {reason}'

        [alert] = self.db.insert_rows(Tables.ALERTS, [{
            'leader_id': records[0].leader_id,
            'disciple': disciple,
            'alert_type': AlertType.PLAN_REMOVAL_REQUEST,
            'title': 'Solicitação de Remoção de Plano',
            'message': message,
            'alert_date': timezone.now(),
        }])
        logger.info(f'Disciple {disciple.pk} requested removal of plan {plan.pk}')
        return alert

    # ─── Internals ────────────────────────────────────────────────────────

    @staticmethod
    def _can_act(user, record):
        if not user or not user.is_authenticated:
            return False
        return user.pk in (record.leader.user_id, record.disciple.user_id)

    @staticmethod
    def _check_forward(record, status):
        if ProgressStatus.RANK[status] < ProgressStatus.RANK[record.status]:
            raise ValidationError(
                f'Transição inválida: "{record.status}" para "{status}".',
                details={'status': 'O progresso de uma etapa não pode retroceder.'},
            )

    def _write(self, record, patch, expected_version):
        """Conditional update on the record version; a lost race raises ConflictError."""
        if expected_version is None:
            version = record.version
        else:
            version = validate_non_negative_int(expected_version, 'version', 'A versão')
        if version != record.version:
            logger.warning(
                f'Stale write on progress record {record.pk}: '
                f'expected version {version}, current {record.version}'
            )
            raise ConflictError(
                'O registro foi modificado por outra sessão. Recarregue e tente novamente.',
                details={'version': record.version},
            )

        rows = self.db.update_rows(
            Tables.PROGRESS,
            {'pk': record.pk, 'version': version},
            {**patch, 'version': version + 1},
        )
        if not rows:
            logger.warning(f'Concurrent write lost on progress record {record.pk} (version {version})')
            raise ConflictError(
                'O registro foi modificado por outra sessão. Recarregue e tente novamente.',
                details={'version': version},
            )
        return rows[0]
