"""Discipleship models: plan templates, their ordered stages, and per-disciple stage progress."""
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel
from apps.core.constants import MaturityLevel, ProgressStatus


class Plan(BaseModel):
    """Reusable discipleship curriculum owned by a leader (planos_discipulado)."""

    leader = models.ForeignKey(
        'members.Leader',
        on_delete=models.CASCADE,
        related_name='plans',
        verbose_name=_('Líder')
    )

    name = models.CharField(
        max_length=200,
        verbose_name=_('Nome do plano'),
        help_text=_('Ex: Fundamentos da Fé')
    )

    description = models.TextField(
        blank=True,
        verbose_name=_('Descrição')
    )

    maturity_level = models.CharField(
        max_length=20,
        choices=MaturityLevel.CHOICES,
        default=MaturityLevel.BEGINNER,
        verbose_name=_('Nível de maturidade')
    )

    estimated_days = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name=_('Duração estimada (dias)')
    )

    class Meta:
        verbose_name = _('Plano de discipulado')
        verbose_name_plural = _('Planos de discipulado')
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    @property
    def stage_count(self):
        return self.stages.count()


class Stage(BaseModel):
    """
    One ordered step of a plan (etapas_plano).

    ``order`` is not unique within a plan: readers sort by (order, created_at).
    """

    plan = models.ForeignKey(
        Plan,
        on_delete=models.CASCADE,
        related_name='stages',
        verbose_name=_('Plano')
    )

    name = models.CharField(
        max_length=200,
        verbose_name=_('Nome da etapa')
    )

    description = models.TextField(
        blank=True,
        verbose_name=_('Descrição')
    )

    order = models.PositiveIntegerField(
        verbose_name=_('Ordem'),
        help_text=_('Posição da etapa no plano')
    )

    estimated_days = models.PositiveIntegerField(
        null=True,
        blank=True,
        verbose_name=_('Duração estimada (dias)')
    )

    suggested_activities = models.TextField(
        blank=True,
        verbose_name=_('Atividades sugeridas')
    )

    key_verses = models.TextField(
        blank=True,
        verbose_name=_('Versículos-chave')
    )

    required_resources = models.TextField(
        blank=True,
        verbose_name=_('Recursos necessários')
    )

    class Meta:
        verbose_name = _('Etapa do plano')
        verbose_name_plural = _('Etapas do plano')
        ordering = ['plan', 'order', 'created_at']

    def __str__(self):
        return f'Etapa {self.order}: {self.name}'


class ProgressRecord(BaseModel):
    """
    One disciple's state for one stage of an assigned plan (progresso_discipulo).

    ``version`` increases on every write; updates are conditional on it.
    """

    leader = models.ForeignKey(
        'members.Leader',
        on_delete=models.CASCADE,
        related_name='progress_records',
        verbose_name=_('Líder')
    )

    disciple = models.ForeignKey(
        'members.Disciple',
        on_delete=models.CASCADE,
        related_name='progress_records',
        verbose_name=_('Discípulo')
    )

    plan = models.ForeignKey(
        Plan,
        on_delete=models.PROTECT,
        related_name='progress_records',
        verbose_name=_('Plano')
    )

    stage = models.ForeignKey(
        Stage,
        on_delete=models.PROTECT,
        related_name='progress_records',
        verbose_name=_('Etapa')
    )

    status = models.CharField(
        max_length=20,
        choices=ProgressStatus.CHOICES,
        default=ProgressStatus.PENDING,
        verbose_name=_('Status')
    )

    started_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Data de início')
    )

    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Data de conclusão')
    )

    observations = models.TextField(
        blank=True,
        verbose_name=_('Observações')
    )

    version = models.PositiveIntegerField(
        default=1,
        verbose_name=_('Versão')
    )

    class Meta:
        verbose_name = _('Progresso do discípulo')
        verbose_name_plural = _('Progresso dos discípulos')
        ordering = ['disciple', 'plan', 'stage__order', 'stage__created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['disciple', 'plan', 'stage'],
                name='unique_progress_per_disciple_plan_stage',
            ),
        ]

    def __str__(self):
        return f'{self.disciple} - {self.stage} ({self.status})'

    @property
    def is_completed(self):
        return self.status == ProgressStatus.COMPLETED
