"""
Ranked personal-data search.

Candidates are narrowed in SQL on the unaccented search columns, then
scored in Python.  Each record accumulates points:

* full name equal to the query (200) or similar above 0.7 (150);
* multi-word queries: first/last name equal to the whole query (120),
  containing it (80), similar above 0.7 (70) or above 0.4 (40);
* document number equal to the raw query (150);
* every term: exact first/last name (50), prefix (20), substring (10),
  word similarity above 0.6 (35) or above 0.3 (5).
"""
from __future__ import annotations

import logging
from datetime import datetime, time, timedelta
from datetime import timezone as dt_timezone
from difflib import SequenceMatcher
from typing import Optional

from django.db.models import Q
from django.utils.dateparse import parse_date

from records.models import Patient, PersonalData
from records.services.text import search_text

logger = logging.getLogger(__name__)

SEARCH_PARAMS = ('q', 'firstName', 'lastName', 'documentValue', 'birthDate')


def similarity(a: str, b: str) -> float:
    if not a or not b:
        return 0.0
    return SequenceMatcher(None, a, b).ratio()


def word_similarity(term: str, text: str) -> float:
    """Best similarity between ``term`` and any word (or the whole) of ``text``."""
    if not term or not text:
        return 0.0
    return max([similarity(term, text)] + [similarity(term, w) for w in text.split()])


def _term_points(term: str, first: str, last: str) -> int:
    if term in (first, last):
        return 50
    if first.startswith(term) or last.startswith(term):
        return 20
    if term in first or term in last:
        return 10
    best = max(word_similarity(term, first), word_similarity(term, last))
    if best > 0.6:
        return 35
    if best > 0.3:
        return 5
    return 0


def _phrase_points(phrase: str, first: str, last: str) -> int:
    if phrase in (first, last):
        return 120
    if phrase in first or phrase in last:
        return 80
    best = max(similarity(first, phrase), similarity(last, phrase))
    if best > 0.7:
        return 70
    if best > 0.4:
        return 40
    return 0


def score(pd: PersonalData, terms: list[str], full_query: str, document_value: Optional[str]) -> tuple[int, bool]:
    """Return ``(rank, is_candidate)`` for one record."""
    first, last = pd.search_first_name or '', pd.search_last_name or ''
    full_name = f'{first} {last}'.strip()
    rank = 0
    if full_name == full_query:
        rank += 200
    elif similarity(full_name, full_query) > 0.7:
        rank += 150
    if len(terms) > 1:
        rank += _phrase_points(full_query, first, last)

    doc_match = bool(document_value) and pd.document_value == document_value
    if doc_match:
        rank += 150

    candidate = doc_match
    for term in terms:
        rank += _term_points(term, first, last)
        if term in first or term in last:
            candidate = True
        elif max(word_similarity(term, first), word_similarity(term, last)) > 0.6:
            candidate = True
    return rank, candidate


def birth_date_filter(value: str) -> Q:
    """Match the UTC calendar day; birth dates are stored as midnight UTC."""
    try:
        day = parse_date(value[:10])
    except ValueError:
        day = None
    if day is None:
        return Q(pk__in=[])
    start = datetime.combine(day, time.min, tzinfo=dt_timezone.utc)
    return Q(birth_date__gte=start, birth_date__lt=start + timedelta(days=1))


def has_search(params) -> bool:
    return any(params.get(k) for k in SEARCH_PARAMS)


def rank_personal_data(params) -> list[str]:
    """Return matching PersonalData ids, best first."""
    q = (params.get('q') or '').strip()
    first_name = (params.get('firstName') or '').strip()
    last_name = (params.get('lastName') or '').strip()
    document_value = (params.get('documentValue') or '').strip() or None
    birth_date = (params.get('birthDate') or '').strip() or None

    raw_terms: list[str] = []
    for chunk in (first_name, last_name, q):
        raw_terms.extend(search_text(chunk).split())
    terms = list(dict.fromkeys(t for t in raw_terms if t))

    if not terms:
        cond = Q()
        if document_value:
            cond |= Q(document_value=document_value)
        if birth_date:
            cond |= birth_date_filter(birth_date)
        if not cond:
            return []
        return list(PersonalData.objects.filter(cond).values_list('id', flat=True))

    full_query = search_text(q or f'{first_name} {last_name}')
    doc_query = q or document_value

    cond = Q(document_value=doc_query) if doc_query else Q()
    for term in terms:
        prefix = term[:3]
        cond |= Q(search_first_name__contains=prefix) | Q(search_last_name__contains=prefix)

    ranked = []
    for pd in PersonalData.objects.filter(cond):
        rank, candidate = score(pd, terms, full_query, doc_query)
        if candidate:
            ranked.append((rank, pd.search_last_name, pd.search_first_name, pd.id))
    ranked.sort(key=lambda r: (-r[0], r[1], r[2]))
    logger.debug("personal data search terms=%s matches=%d", terms, len(ranked))
    return [r[3] for r in ranked]


def ranked_patient_ids(params) -> list[str]:
    """Resolve a ranked personal-data search to patient ids, keeping rank order."""
    pd_ids = rank_personal_data(params)
    if not pd_ids:
        return []
    order = {pid: i for i, pid in enumerate(pd_ids)}
    rows = Patient.objects.filter(personal_data_id__in=pd_ids).values_list('id', 'personal_data_id')
    owners = sorted(rows, key=lambda r: order[r[1]])
    return list(dict.fromkeys(r[0] for r in owners))
