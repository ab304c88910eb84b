"""
Reading the legacy document-store exports.

The dumps are Mongo extended JSON: ids come as ``{"$oid": ...}``, 64-bit
integers as ``{"$numberLong": ...}`` and dates as ``{"$date": ...}``.
"""
import json
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from dateutil import parser as date_parser

logger = logging.getLogger(__name__)

DUMP_FILES = {
    'users': 'user.json',
    'patients': 'patient.json',
    'encounters': 'encounter.json',
    'appointments': 'appointment.json',
    'studies': 'studies.json',
    'results': 'results.json',
    'licenses': 'licenses.json',
}


@dataclass
class Dumps:
    users: list = field(default_factory=list)
    patients: list = field(default_factory=list)
    encounters: list = field(default_factory=list)
    appointments: list = field(default_factory=list)
    studies: list = field(default_factory=list)
    results: list = field(default_factory=list)
    licenses: list = field(default_factory=list)

    def counts(self) -> str:
        return ', '.join(f'{len(getattr(self, name))} {name}' for name in DUMP_FILES)


def load_dumps(directory) -> Dumps:
    directory = Path(directory)
    loaded = {}
    for name, filename in DUMP_FILES.items():
        path = directory / filename
        with path.open(encoding='utf-8') as fh:
            loaded[name] = json.load(fh)
        logger.debug('dump_loaded file=%s items=%s', filename, len(loaded[name]))
    return Dumps(**loaded)


def oid(value):
    """``{"$oid": "abc"}`` -> ``"abc"``; plain strings pass through."""
    if isinstance(value, dict):
        return value.get('$oid')
    return value


def number(value):
    """Unwrap ``$numberLong``; returns ``None`` for anything non-numeric."""
    if isinstance(value, dict):
        value = value.get('$numberLong')
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def unix_to_datetime(seconds):
    if seconds is None:
        return None
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def parse_date(value):
    if isinstance(value, dict):
        value = value.get('$date')
    if isinstance(value, dict):
        value = value.get('$numberLong')
    if isinstance(value, (int, float)) or (isinstance(value, str) and value.lstrip('-').isdigit()):
        return unix_to_datetime(int(value) / 1000)
    if not value:
        return None
    try:
        parsed = date_parser.isoparse(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def object_id() -> str:
    """A fresh 24-character hex id, shaped like the legacy ones."""
    return secrets.token_hex(12)
