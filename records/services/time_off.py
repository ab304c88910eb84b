from datetime import datetime, time

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework.exceptions import NotFound, ValidationError

from records.models import TimeOffEvent

TYPES = ('vacation', 'cancelDay', 'other')


def _parse(value, field):
    if isinstance(value, datetime):
        dt = value
    else:
        dt = parse_datetime(str(value)) if value else None
        if dt is None and value:
            d = parse_date(str(value))
            dt = datetime.combine(d, time.min) if d else None
    if dt is None:
        raise ValidationError({field: f'{field} is required and must be a valid date'})
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return timezone.localtime(dt)


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=23, minute=59, second=59, microsecond=999000)


def validate_time_off(data: dict, instance: TimeOffEvent = None) -> dict:
    """Both dates present, a known type, start <= end; dates widened to whole days."""
    merged = {
        'startDate': instance.start_date if instance else None,
        'endDate': instance.end_date if instance else None,
        'type': instance.type if instance else None,
    }
    merged.update({k: v for k, v in data.items() if k in merged})
    start = start_of_day(_parse(merged['startDate'], 'startDate'))
    end = end_of_day(_parse(merged['endDate'], 'endDate'))
    if merged['type'] not in TYPES:
        raise ValidationError({'type': f'type must be one of {", ".join(TYPES)}'})
    if start > end:
        raise ValidationError({'startDate': 'startDate must be before or equal to endDate'})
    out = dict(data)
    out.update(startDate=start, endDate=end, type=merged['type'])
    return out


def get_time_off_or_404(event_id) -> TimeOffEvent:
    event = TimeOffEvent.objects.filter(id=event_id).first()
    if not event:
        raise NotFound(f'No record found for id \'{event_id}\'')
    return event


def apply_time_off(event: TimeOffEvent, data: dict) -> TimeOffEvent:
    event.start_date = data['startDate']
    event.end_date = data['endDate']
    event.type = data['type']
    if 'notes' in data:
        event.notes = data['notes']
    if data.get('medicId'):
        event.medic_id = data['medicId']
    event.save()
    return event


def format_time_off(event: TimeOffEvent) -> dict:
    return {
        'id': event.id,
        'medicId': event.medic_id,
        'startDate': event.start_date.isoformat(),
        'endDate': event.end_date.isoformat(),
        'type': event.type,
        'notes': event.notes,
    }
