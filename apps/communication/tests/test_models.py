"""Tests for communication models."""
import pytest

from apps.core.constants import AlertType
from apps.members.tests.factories import DiscipleFactory

from .factories import AlertFactory


@pytest.mark.django_db
class TestAlertModel:

    def test_str(self):
        alert = AlertFactory(title='Ligar para Ana', alert_type=AlertType.FOLLOW_UP)
        assert str(alert) == 'Ligar para Ana (Follow-up)'

    def test_disciple_removal_keeps_alert(self):
        disciple = DiscipleFactory()
        alert = AlertFactory(leader=disciple.leader, disciple=disciple)
        disciple.delete()
        alert.refresh_from_db()
        assert alert.disciple is None
