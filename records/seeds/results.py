from __future__ import annotations

import json
from dataclasses import dataclass, field

from .dumps import oid
from .normalize import strip_class
from .stats import ProcessingStats


@dataclass
class ResultsResult:
    results: list
    stats: ProcessingStats = field(default_factory=ProcessingStats)


def process_results(results: list, kept_study_ids: set) -> ResultsResult:
    stats = ProcessingStats(total=len(results))
    seeds = []
    for result in results:
        study_id = oid(result.get('study'))
        if study_id not in kept_study_ids:
            stats.discard('missing_study_reference')
            continue
        seeds.append({
            'id': oid(result['_id']),
            'data': json.dumps(strip_class(result.get('data') or {}), ensure_ascii=False),
            'studyId': study_id,
            'type': result.get('type'),
        })
    stats.kept = len(seeds)
    return ResultsResult(results=seeds, stats=stats)
