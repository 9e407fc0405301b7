"""
Care models - the leader's meeting log and prayer requests.

Both belong to a leader; meetings always concern one disciple, prayer
requests may be personal or general.
"""
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel
from apps.core.constants import PrayerStatus, PrayerUrgency


# ─── Meetings ────────────────────────────────────────────────────────────────


class Meeting(BaseModel):
    """A one-on-one meeting between a leader and a disciple (encontros)."""

    leader = models.ForeignKey(
        'members.Leader',
        on_delete=models.CASCADE,
        related_name='meetings',
        verbose_name=_('Líder')
    )

    disciple = models.ForeignKey(
        'members.Disciple',
        on_delete=models.CASCADE,
        related_name='meetings',
        verbose_name=_('Discípulo')
    )

    meeting_date = models.DateTimeField(
        verbose_name=_('Data do encontro')
    )

    topic = models.CharField(
        max_length=200,
        blank=True,
        verbose_name=_('Tópico')
    )

    discussion_notes = models.TextField(
        blank=True,
        verbose_name=_('Notas da discussão')
    )

    next_steps = models.TextField(
        blank=True,
        verbose_name=_('Próximos passos')
    )

    class Meta:
        verbose_name = _('Encontro')
        verbose_name_plural = _('Encontros')
        ordering = ['-meeting_date']

    def __str__(self):
        return f'{self.disciple} - {self.meeting_date:%d/%m/%Y}'


# ─── Prayer requests ─────────────────────────────────────────────────────────


class PrayerRequest(BaseModel):
    """
    A prayer request kept by a leader (pedidos de oração).

    ``completed_at`` follows ``status``: it is stamped the first time the
    request is saved as "Concluído" and cleared when it is reopened.
    """

    leader = models.ForeignKey(
        'members.Leader',
        on_delete=models.CASCADE,
        related_name='prayer_requests',
        verbose_name=_('Líder')
    )

    disciple = models.ForeignKey(
        'members.Disciple',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='prayer_requests',
        verbose_name=_('Discípulo'),
        help_text=_('Vazio para pedidos pessoais ou gerais')
    )

    request = models.TextField(
        verbose_name=_('Pedido')
    )

    category = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Categoria')
    )

    urgency = models.CharField(
        max_length=10,
        choices=PrayerUrgency.CHOICES,
        default=PrayerUrgency.MEDIUM,
        verbose_name=_('Urgência')
    )

    status = models.CharField(
        max_length=20,
        choices=PrayerStatus.CHOICES,
        default=PrayerStatus.PRAYING,
        verbose_name=_('Status')
    )

    requested_at = models.DateTimeField(
        default=timezone.now,
        verbose_name=_('Data do pedido')
    )

    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Data de conclusão')
    )

    testimony = models.TextField(
        blank=True,
        verbose_name=_('Testemunho')
    )

    class Meta:
        verbose_name = _('Pedido de oração')
        verbose_name_plural = _('Pedidos de oração')
        ordering = ['-requested_at']

    def __str__(self):
        return self.request[:50]

    def save(self, *args, **kwargs):
        if self.status == PrayerStatus.COMPLETED:
            if self.completed_at is None:
                self.completed_at = timezone.now()
        else:
            self.completed_at = None
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'status' in update_fields:
            kwargs['update_fields'] = set(update_fields) | {'completed_at'}
        super().save(*args, **kwargs)

    def mark_completed(self, testimony=''):
        """Close the request, optionally recording how it was answered."""
        self.status = PrayerStatus.COMPLETED
        if testimony:
            self.testimony = testimony
        self.save(update_fields=['status', 'testimony', 'updated_at'])
