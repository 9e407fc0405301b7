"""Communication models - alerts shown to leaders."""
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel
from apps.core.constants import AlertType


class Alert(BaseModel):
    """
    Reminder or request addressed to a leader, optionally about one disciple (alertas).

    ``is_active`` doubles as the on/off switch a leader toggles from the alert list.
    """

    leader = models.ForeignKey(
        'members.Leader',
        on_delete=models.CASCADE,
        related_name='alerts',
        verbose_name=_('Líder')
    )

    disciple = models.ForeignKey(
        'members.Disciple',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='alerts',
        verbose_name=_('Discípulo')
    )

    alert_type = models.CharField(
        max_length=40,
        choices=AlertType.CHOICES,
        default=AlertType.REMINDER,
        verbose_name=_('Tipo')
    )

    title = models.CharField(
        max_length=200,
        verbose_name=_('Título')
    )

    message = models.TextField(
        verbose_name=_('Mensagem')
    )

    alert_date = models.DateTimeField(
        verbose_name=_('Data do alerta')
    )

    is_read = models.BooleanField(
        default=False,
        verbose_name=_('Lido')
    )

    read_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Lido em')
    )

    class Meta:
        verbose_name = _('Alerta')
        verbose_name_plural = _('Alertas')
        ordering = ['-alert_date']

    def __str__(self):
        return f'{self.title} ({self.get_alert_type_display()})'
