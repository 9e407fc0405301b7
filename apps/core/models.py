"""Base models for Pastor Digital - UUID primary keys, timestamps, active flag."""
import uuid

from django.db import models
from django.utils.translation import gettext_lazy as _


class ActiveManager(models.Manager):
    """Returns only active (is_active=True) objects."""

    def get_queryset(self):
        return super().get_queryset().filter(is_active=True)


class AllObjectsManager(models.Manager):
    """Returns all objects including inactive ones - use for admin and the persistence port."""
    pass


class BaseModel(models.Model):
    """Abstract base with UUID primary key, timestamps, and is_active flag."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        verbose_name=_('ID')
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name=_('Data de criação')
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name=_('Data de modificação')
    )

    is_active = models.BooleanField(
        default=True,
        verbose_name=_('Ativo'),
        help_text=_('Indica se este registro está ativo')
    )

    objects = AllObjectsManager()
    active_objects = ActiveManager()

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def deactivate(self):
        self.is_active = False
        self.save(update_fields=['is_active', 'updated_at'])

    def activate(self):
        self.is_active = True
        self.save(update_fields=['is_active', 'updated_at'])
