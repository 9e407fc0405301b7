"""Test factories for communication app."""
import factory
from django.utils import timezone
from factory.django import DjangoModelFactory

from apps.communication.models import Alert
from apps.core.constants import AlertType
from apps.members.tests.factories import LeaderFactory


class AlertFactory(DjangoModelFactory):
    """Creates unread reminder alerts for a leader."""

    class Meta:
        model = Alert

    leader = factory.SubFactory(LeaderFactory)
    alert_type = AlertType.REMINDER
    title = factory.Sequence(lambda n: f'Alerta {n}')
    message = factory.Faker('sentence', locale='pt_BR')
    alert_date = factory.LazyFunction(timezone.now)
    is_read = False
