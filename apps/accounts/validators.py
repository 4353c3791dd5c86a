import re

from django.core.exceptions import ValidationError


PHONE_RE = re.compile(r'^[0-9+\s-]+$')
ZIP_CODE_RE = re.compile(r'^\d{2}-\d{3}$')
PESEL_RE = re.compile(r'^\d{11}$')


class PasswordCharacterClassValidator:
    """Require at least one lowercase letter, one uppercase letter and one digit."""

    def validate(self, password, user=None):
        if not (
            re.search(r'[a-z]', password)
            and re.search(r'[A-Z]', password)
            and re.search(r'\d', password)
        ):
            raise ValidationError(
                'Password must contain a lowercase letter, an uppercase letter and a digit.',
                code='password_character_classes',
            )

    def get_help_text(self):
        return 'Your password must contain a lowercase letter, an uppercase letter and a digit.'


def validate_phone(value):
    if len(value) < 9 or not PHONE_RE.match(value):
        raise ValidationError('Enter a valid phone number (at least 9 characters).')


def validate_zip_code(value):
    if not ZIP_CODE_RE.match(value):
        raise ValidationError('Zip code must have the format NN-NNN.')


def validate_pesel(value):
    if not PESEL_RE.match(value):
        raise ValidationError('PESEL must consist of 11 digits.')
