"""Reusable input validators for the service layer."""
from django import forms
from django.core.exceptions import ValidationError as DjangoValidationError

from .exceptions import ValidationError


def validate_required_text(value, field, label):
    """Return the stripped text or raise if it is empty."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(
            f'{label} é obrigatório.',
            details={field: 'Este campo é obrigatório.'},
        )
    return value.strip()


def validate_non_negative_int(value, field, label, required=False):
    """
    Clean an integer-like value (int or digit string) with Django's IntegerField.

    Booleans, fractional values, non-numeric strings and negatives are refused.
    Blank values give None unless ``required``.
    """
    if isinstance(value, bool):
        raise ValidationError(
            f'{label} deve ser um número inteiro.',
            details={field: f'Valor inválido: {value!r}.'},
        )
    try:
        return forms.IntegerField(min_value=0, required=required).clean(value)
    except DjangoValidationError as e:
        raise ValidationError(
            f'{label} inválido: {value!r}.',
            details={field: ' '.join(e.messages)},
        ) from e


def validate_choice(value, choices, field, label):
    """Reject values outside a closed set."""
    if value not in choices:
        raise ValidationError(
            f'{label} inválido: {value!r}.',
            details={field: f'Opções válidas: {", ".join(choices)}.'},
        )
    return value
