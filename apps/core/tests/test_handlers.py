"""Tests for the API exception handler."""
from unittest.mock import Mock

import pytest
from rest_framework.exceptions import NotAuthenticated

from apps.core.exceptions import (
    BackendUnavailableError,
    ConflictError,
    DataIntegrityError,
    NotFoundError,
    ValidationError,
)
from apps.core.handlers import api_exception_handler


@pytest.fixture
def context():
    return {'view': Mock(), 'request': Mock()}


class TestApiExceptionHandler:

    @pytest.mark.parametrize('exc,expected', [
        (ValidationError('Nome obrigatório.'), 422),
        (NotFoundError('Plan', 'abc'), 404),
        (ConflictError('Versão desatualizada.'), 409),
        (DataIntegrityError('Etapa ausente.'), 500),
        (BackendUnavailableError('Sem conexão.'), 503),
    ])
    def test_status_codes(self, exc, expected, context):
        response = api_exception_handler(exc, context)
        assert response.status_code == expected
        assert response.data['error'] == exc.message

    def test_details_are_included(self, context):
        exc = ValidationError('Inválido.', details={'order': 'Valor inválido.'})
        response = api_exception_handler(exc, context)
        assert response.data == {'error': 'Inválido.', 'details': {'order': 'Valor inválido.'}}

    def test_not_found_message(self, context):
        response = api_exception_handler(NotFoundError('Plan', 42), context)
        assert response.data == {'error': 'Plan id=42 not found'}

    def test_other_exceptions_use_drf_handler(self, context):
        response = api_exception_handler(NotAuthenticated(), context)
        assert response.status_code in (401, 403)

    def test_unknown_exceptions_are_not_handled(self, context):
        assert api_exception_handler(RuntimeError('boom'), context) is None
