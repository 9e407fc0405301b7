"""Test factories for members app."""
import factory
from django.contrib.auth import get_user_model
from factory.django import DjangoModelFactory

from apps.core.constants import LeaderType, DiscipleStatus, SpiritualMaturity
from apps.members.models import Leader, Disciple

User = get_user_model()


class UserFactory(DjangoModelFactory):
    """Creates Django User instances for testing."""

    class Meta:
        model = User

    username = factory.Sequence(lambda n: f'user{n}')
    email = factory.LazyAttribute(lambda obj: f'{obj.username}@example.com')
    first_name = factory.Faker('first_name', locale='pt_BR')
    last_name = factory.Faker('last_name', locale='pt_BR')
    password = factory.PostGenerationMethodCall('set_password', 'testpass123')


class LeaderFactory(DjangoModelFactory):
    """Creates Leader profiles, each with its own user account."""

    class Meta:
        model = Leader

    user = factory.SubFactory(UserFactory)
    name = factory.Faker('name', locale='pt_BR')
    email = factory.LazyAttribute(lambda obj: obj.user.email)
    leader_type = LeaderType.DISCIPLER


class PastorFactory(LeaderFactory):
    leader_type = LeaderType.PASTOR


class DiscipleFactory(DjangoModelFactory):
    """Creates active disciples without a linked account."""

    class Meta:
        model = Disciple

    leader = factory.SubFactory(LeaderFactory)
    name = factory.Faker('name', locale='pt_BR')
    contact = factory.Faker('phone_number', locale='pt_BR')
    city = factory.Faker('city', locale='pt_BR')
    state = 'SP'
    spiritual_maturity = SpiritualMaturity.BEGINNER
    status = DiscipleStatus.ACTIVE


class DiscipleWithUserFactory(DiscipleFactory):
    """Disciple that can sign in and follow their own plans."""

    user = factory.SubFactory(UserFactory)
