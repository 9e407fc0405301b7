"""Test factories for care app."""
import factory
from django.utils import timezone
from factory.django import DjangoModelFactory

from apps.care.models import Meeting, PrayerRequest
from apps.members.tests.factories import DiscipleFactory, LeaderFactory


class MeetingFactory(DjangoModelFactory):
    """Creates a meeting with a disciple of the same leader."""

    class Meta:
        model = Meeting

    leader = factory.SubFactory(LeaderFactory)
    disciple = factory.SubFactory(DiscipleFactory, leader=factory.SelfAttribute('..leader'))
    meeting_date = factory.LazyFunction(timezone.now)
    topic = factory.Faker('sentence', nb_words=4, locale='pt_BR')
    discussion_notes = factory.Faker('paragraph', locale='pt_BR')


class PrayerRequestFactory(DjangoModelFactory):
    """Creates a general prayer request, not tied to a disciple."""

    class Meta:
        model = PrayerRequest

    leader = factory.SubFactory(LeaderFactory)
    disciple = None
    request = factory.Faker('sentence', locale='pt_BR')
    category = 'Saúde'
