"""Tests for core validators."""
import pytest

from apps.core.exceptions import ValidationError
from apps.core.validators import (
    validate_choice,
    validate_non_negative_int,
    validate_required_text,
)


class TestValidateRequiredText:

    def test_strips_whitespace(self):
        assert validate_required_text('  Oração ', 'name', 'O nome') == 'Oração'

    @pytest.mark.parametrize('value', [None, '', '   ', 42])
    def test_rejects_empty_or_non_text(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_required_text(value, 'name', 'O nome')
        assert exc_info.value.details == {'name': 'Este campo é obrigatório.'}


class TestValidateNonNegativeInt:

    @pytest.mark.parametrize('value,expected', [
        (0, 0),
        (7, 7),
        ('12', 12),
        (' 3 ', 3),
        ('+4', 4),
        (5.0, 5),
    ])
    def test_accepts_integer_like_values(self, value, expected):
        assert validate_non_negative_int(value, 'order', 'A ordem') == expected

    @pytest.mark.parametrize('value', ['abc', '1.5', 2.5, True, False, '--1', '3 dias'])
    def test_rejects_non_integers(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_non_negative_int(value, 'order', 'A ordem')
        assert 'order' in exc_info.value.details

    @pytest.mark.parametrize('value', [-1, '-5'])
    def test_rejects_negatives(self, value):
        with pytest.raises(ValidationError):
            validate_non_negative_int(value, 'order', 'A ordem')

    def test_blank_is_none_when_optional(self):
        assert validate_non_negative_int(None, 'estimated_days', 'A duração') is None
        assert validate_non_negative_int('', 'estimated_days', 'A duração') is None

    def test_blank_is_rejected_when_required(self):
        with pytest.raises(ValidationError):
            validate_non_negative_int(None, 'order', 'A ordem', required=True)


class TestValidateChoice:

    def test_accepts_member(self):
        assert validate_choice('Líder', ['Iniciante', 'Líder'], 'maturity_level', 'Nível') == 'Líder'

    def test_rejects_outsider(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_choice('Expert', ['Iniciante', 'Líder'], 'maturity_level', 'Nível')
        assert 'Iniciante, Líder' in exc_info.value.details['maturity_level']
