"""
Model fields that transparently encrypt their value at rest.

Both fields store hex ciphertext in a text column.  Because the cipher
is deterministic, ``filter(field=value)`` and ``__in`` lookups keep
working; pattern lookups (``contains``, ``startswith``) do not.
"""
from __future__ import annotations

import json

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from .services.crypto import decrypt_value, encrypt_value


class EncryptedTextField(models.TextField):
    description = "Text encrypted with the project field key"

    def from_db_value(self, value, expression, connection):
        return decrypt_value(value)

    def get_prep_value(self, value):
        value = super().get_prep_value(value)
        return encrypt_value(value)


class EncryptedJSONField(models.TextField):
    """JSON document serialized, then encrypted."""

    description = "JSON encrypted with the project field key"

    def from_db_value(self, value, expression, connection):
        if value is None or value == '':
            return None
        return json.loads(decrypt_value(value))

    def to_python(self, value):
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                return value
        return value

    def get_prep_value(self, value):
        if value is None:
            return None
        return encrypt_value(json.dumps(value, cls=DjangoJSONEncoder))

    def value_to_string(self, obj):
        return json.dumps(self.value_from_object(obj), cls=DjangoJSONEncoder)
