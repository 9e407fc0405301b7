"""Centralized constants and choices for the application."""
from django.utils.translation import gettext_lazy as _


class LeaderType:
    """Kinds of leadership an account can hold."""
    PASTOR = 'Pastor'
    DISCIPLER = 'Discipulador'
    CELL_LEADER = 'Líder de Célula'
    MENTOR = 'Mentor'

    CHOICES = [
        (PASTOR, _('Pastor')),
        (DISCIPLER, _('Discipulador')),
        (CELL_LEADER, _('Líder de Célula')),
        (MENTOR, _('Mentor')),
    ]


class SpiritualMaturity:
    """Spiritual maturity of a disciple."""
    BEGINNER = 'Iniciante'
    INTERMEDIATE = 'Intermediário'
    MULTIPLIER = 'Multiplicador'

    CHOICES = [
        (BEGINNER, _('Iniciante')),
        (INTERMEDIATE, _('Intermediário')),
        (MULTIPLIER, _('Multiplicador')),
    ]


class DiscipleStatus:
    """Lifecycle of a disciple under a leader."""
    ACTIVE = 'Ativo'
    INACTIVE = 'Inativo'
    COMPLETED = 'Concluído'

    CHOICES = [
        (ACTIVE, _('Ativo')),
        (INACTIVE, _('Inativo')),
        (COMPLETED, _('Concluído')),
    ]


class MaturityLevel:
    """Target maturity level of a discipleship plan."""
    BEGINNER = 'Iniciante'
    INTERMEDIATE = 'Intermediário'
    ADVANCED = 'Avançado'
    LEADER = 'Líder'

    CHOICES = [
        (BEGINNER, _('Iniciante')),
        (INTERMEDIATE, _('Intermediário')),
        (ADVANCED, _('Avançado')),
        (LEADER, _('Líder')),
    ]

    VALUES = [BEGINNER, INTERMEDIATE, ADVANCED, LEADER]


class ProgressStatus:
    """Status of a single stage for a disciple."""
    PENDING = 'Pendente'
    IN_PROGRESS = 'Em Andamento'
    COMPLETED = 'Concluído'

    CHOICES = [
        (PENDING, _('Pendente')),
        (IN_PROGRESS, _('Em Andamento')),
        (COMPLETED, _('Concluído')),
    ]

    # Forward-only rank; a record may only move to a higher rank
    RANK = {PENDING: 0, IN_PROGRESS: 1, COMPLETED: 2}


class PlanProgressStatus:
    """Coarse status derived from a plan's completion percentage."""
    NOT_STARTED = 'Não Iniciado'
    IN_PROGRESS = 'Em Andamento'
    COMPLETED = 'Concluído'

    CHOICES = [
        (NOT_STARTED, _('Não Iniciado')),
        (IN_PROGRESS, _('Em Andamento')),
        (COMPLETED, _('Concluído')),
    ]

    VALUES = [NOT_STARTED, IN_PROGRESS, COMPLETED]


class AlertType:
    """Kinds of alerts a leader can receive."""
    REMINDER = 'lembrete'
    BIRTHDAY = 'aniversario'
    FOLLOW_UP = 'follow-up'
    URGENT = 'urgente'
    PLAN_REMOVAL_REQUEST = 'solicitacao_remocao_plano'

    CHOICES = [
        (REMINDER, _('Lembrete')),
        (BIRTHDAY, _('Aniversário')),
        (FOLLOW_UP, _('Follow-up')),
        (URGENT, _('Urgente')),
        (PLAN_REMOVAL_REQUEST, _('Solicitação de remoção de plano')),
    ]


class PrayerUrgency:
    """How pressing a prayer request is."""
    LOW = 'Baixa'
    MEDIUM = 'Média'
    HIGH = 'Alta'

    CHOICES = [
        (LOW, _('Baixa')),
        (MEDIUM, _('Média')),
        (HIGH, _('Alta')),
    ]


class PrayerStatus:
    """Lifecycle of a prayer request."""
    PRAYING = 'Em Oração'
    UPDATED = 'Atualizado'
    COMPLETED = 'Concluído'

    CHOICES = [
        (PRAYING, _('Em Oração')),
        (UPDATED, _('Atualizado')),
        (COMPLETED, _('Concluído')),
    ]


class Tables:
    """Logical table names exposed by the persistence port."""
    PLANS = 'planos_discipulado'
    STAGES = 'etapas_plano'
    PROGRESS = 'progresso_discipulo'
    DISCIPLES = 'discipulos'
    ALERTS = 'alertas'
