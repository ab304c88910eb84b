from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from dateutil.relativedelta import relativedelta
from django.utils import timezone as tz

from records.services.time_off import TYPES, end_of_day, start_of_day

from .dumps import number, oid, unix_to_datetime
from .normalize import to_iso
from .stats import ProcessingStats


@dataclass
class LicensesResult:
    licenses: list
    stats: ProcessingStats = field(default_factory=ProcessingStats)


def process_licenses(licenses: list, kept_user_ids: set, *, now=None) -> LicensesResult:
    """Turn medic leave records into whole-day time-off seeds.

    Leaves that ended more than a month ago are dropped, as are exact
    repeats of the same medic, range and type.
    """
    stats = ProcessingStats(total=len(licenses))
    now = now or datetime.now(timezone.utc)
    cutoff = start_of_day(tz.localtime(now - relativedelta(months=1)))
    seen, seeds = set(), []

    for license_ in licenses:
        license_ = license_ or {}
        medic_id = oid(license_.get('medic'))
        start_ts, end_ts = number(license_.get('start')), number(license_.get('end'))
        if not medic_id or start_ts is None or end_ts is None:
            stats.discard('invalid_license_data')
            continue
        if medic_id not in kept_user_ids:
            stats.discard('missing_medic_reference')
            continue

        start, end = unix_to_datetime(start_ts), unix_to_datetime(end_ts)
        if start is None or end is None:
            stats.discard('invalid_date_range')
            continue
        start, end = start_of_day(tz.localtime(start)), end_of_day(tz.localtime(end))
        if start > end:
            stats.discard('invalid_date_range')
            continue
        if end < cutoff:
            stats.discard('license_too_old')
            continue

        kind = license_.get('type') if license_.get('type') in TYPES else 'other'
        key = (medic_id, start, end, kind)
        if key in seen:
            stats.discard('duplicate_license')
            continue
        seen.add(key)
        seeds.append({
            'medicId': medic_id,
            'startDate': to_iso(start),
            'endDate': to_iso(end),
            'type': kind,
            'notes': None,
        })

    stats.kept = len(seeds)
    return LicensesResult(licenses=seeds, stats=stats)
