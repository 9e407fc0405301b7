"""
Persistence port for the discipleship services.

Services never talk to a global client: they receive a ``PersistencePort`` at
construction time and only use its four row operations plus ``atomic()``.
``DjangoPersistence`` is the ORM-backed implementation used in production and
in the test-suite.

Filters are Django lookup dicts (``{'plan_id': ..., 'stage__order__gte': 2}``);
rows are model instances.
"""
import functools
import logging
from abc import ABC, abstractmethod

from django.db import InterfaceError, OperationalError, transaction
from django.utils import timezone

from apps.core.constants import Tables
from apps.core.exceptions import BackendUnavailableError, DataIntegrityError

logger = logging.getLogger(__name__)


class PersistencePort(ABC):
    """The four row operations the discipleship core needs from its backend."""

    @abstractmethod
    def insert_rows(self, table, rows):
        """Insert a list of field dicts and return the inserted rows."""

    @abstractmethod
    def update_rows(self, table, filters, patch):
        """Apply ``patch`` to every row matching ``filters`` and return the updated rows."""

    @abstractmethod
    def query_rows(self, table, filters=None, order_by=None, related=()):
        """Return the rows matching ``filters``, optionally ordered and with joined relations."""

    @abstractmethod
    def delete_rows(self, table, filters):
        """Delete the rows matching ``filters`` and return how many were removed."""

    @abstractmethod
    def atomic(self):
        """Context manager making every call inside it all-or-nothing."""


def _translate_backend_errors(method):
    """Re-raise transport failures as BackendUnavailableError; let everything else through."""

    @functools.wraps(method)
    def wrapper(self, table, *args, **kwargs):
        try:
            return method(self, table, *args, **kwargs)
        except (OperationalError, InterfaceError) as e:
            logger.error(f'Backend failure on {method.__name__}({table}): {e}')
            raise BackendUnavailableError(
                'O banco de dados está indisponível no momento.',
                details={'table': table},
            ) from e

    return wrapper


class DjangoPersistence(PersistencePort):
    """PersistencePort over the Django ORM."""

    def __init__(self, using=None):
        self.using = using

    @staticmethod
    def model_for(table):
        """Resolve a logical table name to its model."""
        from apps.communication.models import Alert
        from apps.members.models import Disciple
        from .models import Plan, Stage, ProgressRecord

        models_by_table = {
            Tables.PLANS: Plan,
            Tables.STAGES: Stage,
            Tables.PROGRESS: ProgressRecord,
            Tables.DISCIPLES: Disciple,
            Tables.ALERTS: Alert,
        }
        try:
            return models_by_table[table]
        except KeyError:
            raise DataIntegrityError(f'Tabela desconhecida: {table}')

    def _manager(self, table):
        manager = self.model_for(table).objects
        if self.using:
            return manager.db_manager(self.using)
        return manager

    @_translate_backend_errors
    def insert_rows(self, table, rows):
        manager = self._manager(table)
        with transaction.atomic(using=self.using):
            return [manager.create(**row) for row in rows]

    @_translate_backend_errors
    def update_rows(self, table, filters, patch):
        model = self.model_for(table)
        queryset = self._manager(table).filter(**filters)
        values = dict(patch)
        if any(field.name == 'updated_at' for field in model._meta.fields):
            # QuerySet.update() skips auto_now
            values.setdefault('updated_at', timezone.now())
        with transaction.atomic(using=self.using):
            pks = list(queryset.select_for_update().values_list('pk', flat=True))
            if not pks:
                return []
            updated = self._manager(table).filter(pk__in=pks, **filters).update(**values)
            if not updated:
                return []
            return list(self._manager(table).filter(pk__in=pks))

    @_translate_backend_errors
    def query_rows(self, table, filters=None, order_by=None, related=()):
        queryset = self._manager(table).filter(**(filters or {}))
        if related:
            queryset = queryset.select_related(*related)
        if order_by:
            queryset = queryset.order_by(*order_by)
        return list(queryset)

    @_translate_backend_errors
    def delete_rows(self, table, filters):
        deleted, _ = self._manager(table).filter(**filters).delete()
        return deleted

    def atomic(self):
        return transaction.atomic(using=self.using)
