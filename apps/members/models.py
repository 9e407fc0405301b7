"""
Members models - leader profiles and the disciples they mentor.

Models:
- Leader: Account that owns plans, disciples and progress data
- Disciple: Person being mentored by a leader; may sign in to follow their plans
"""
from django.contrib.auth import get_user_model
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.models import BaseModel
from apps.core.constants import LeaderType, SpiritualMaturity, DiscipleStatus

User = get_user_model()


# =============================================================================
# LEADER MODEL
# =============================================================================

class Leader(BaseModel):
    """
    Leader profile linked to a Django user.

    Every plan, disciple, progress record and alert is owned by exactly one leader.
    """

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='leader_profile',
        verbose_name=_('Conta de usuário')
    )

    name = models.CharField(
        max_length=200,
        verbose_name=_('Nome')
    )

    email = models.EmailField(
        blank=True,
        verbose_name=_('E-mail')
    )

    leader_type = models.CharField(
        max_length=30,
        choices=LeaderType.CHOICES,
        default=LeaderType.DISCIPLER,
        verbose_name=_('Tipo de liderança')
    )

    class Meta:
        verbose_name = _('Líder')
        verbose_name_plural = _('Líderes')
        ordering = ['name']

    def __str__(self):
        return f'{self.name} ({self.leader_type})'

    @property
    def active_disciples_count(self):
        return self.disciples.filter(status=DiscipleStatus.ACTIVE).count()


# =============================================================================
# DISCIPLE MODEL
# =============================================================================

class Disciple(BaseModel):
    """
    A person being mentored by a leader.

    The optional user link lets the disciple sign in and mark their own
    plan stages as completed.
    """

    leader = models.ForeignKey(
        Leader,
        on_delete=models.CASCADE,
        related_name='disciples',
        verbose_name=_('Líder')
    )

    user = models.OneToOneField(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='disciple_profile',
        verbose_name=_('Conta de usuário')
    )

    name = models.CharField(
        max_length=200,
        verbose_name=_('Nome')
    )

    contact = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Contato')
    )

    # Address
    address = models.CharField(
        max_length=255,
        blank=True,
        verbose_name=_('Endereço')
    )

    city = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Cidade')
    )

    state = models.CharField(
        max_length=50,
        blank=True,
        verbose_name=_('Estado')
    )

    postal_code = models.CharField(
        max_length=10,
        blank=True,
        verbose_name=_('CEP')
    )

    latitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        verbose_name=_('Latitude')
    )

    longitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        verbose_name=_('Longitude')
    )

    # Discipleship
    spiritual_maturity = models.CharField(
        max_length=20,
        choices=SpiritualMaturity.CHOICES,
        default=SpiritualMaturity.BEGINNER,
        verbose_name=_('Maturidade espiritual')
    )

    status = models.CharField(
        max_length=20,
        choices=DiscipleStatus.CHOICES,
        default=DiscipleStatus.ACTIVE,
        verbose_name=_('Status')
    )

    discipleship_start_date = models.DateField(
        null=True,
        blank=True,
        verbose_name=_('Início do discipulado')
    )

    gifts_talents = models.TextField(
        blank=True,
        verbose_name=_('Dons e talentos')
    )

    growth_areas = models.TextField(
        blank=True,
        verbose_name=_('Dificuldades e áreas de crescimento')
    )

    cell_group = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Grupo / célula')
    )

    last_contact_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name=_('Último contato')
    )

    class Meta:
        verbose_name = _('Discípulo')
        verbose_name_plural = _('Discípulos')
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def full_address(self):
        """Return formatted full address."""
        parts = [self.address, self.city, self.state, self.postal_code]
        return ', '.join(filter(None, parts))
