"""Tests for care models."""
import pytest

from apps.care.models import Meeting
from apps.core.constants import PrayerStatus, PrayerUrgency
from apps.members.tests.factories import DiscipleFactory

from .factories import MeetingFactory, PrayerRequestFactory


@pytest.mark.django_db
class TestMeetingModel:

    def test_str(self):
        meeting = MeetingFactory(disciple__name='Ana Lima')
        assert str(meeting).startswith('Ana Lima - ')

    def test_removed_with_disciple(self):
        meeting = MeetingFactory()
        meeting.disciple.delete()
        assert not Meeting.objects.filter(pk=meeting.pk).exists()


@pytest.mark.django_db
class TestPrayerRequestModel:

    def test_defaults(self):
        prayer = PrayerRequestFactory()
        assert prayer.urgency == PrayerUrgency.MEDIUM
        assert prayer.status == PrayerStatus.PRAYING
        assert prayer.requested_at is not None
        assert prayer.completed_at is None

    def test_completed_status_stamps_date(self):
        prayer = PrayerRequestFactory(status=PrayerStatus.COMPLETED)
        assert prayer.completed_at is not None

    def test_reopening_clears_date(self):
        prayer = PrayerRequestFactory(status=PrayerStatus.COMPLETED)
        prayer.status = PrayerStatus.UPDATED
        prayer.save()
        prayer.refresh_from_db()
        assert prayer.completed_at is None

    def test_mark_completed(self):
        prayer = PrayerRequestFactory()
        prayer.mark_completed(testimony='Cirurgia correu bem')
        prayer.refresh_from_db()
        assert prayer.status == PrayerStatus.COMPLETED
        assert prayer.completed_at is not None
        assert prayer.testimony == 'Cirurgia correu bem'

    def test_disciple_removal_keeps_request(self):
        disciple = DiscipleFactory()
        prayer = PrayerRequestFactory(leader=disciple.leader, disciple=disciple)
        disciple.delete()
        prayer.refresh_from_db()
        assert prayer.disciple is None
