import re
import unicodedata

import bleach

_WORD_RE = re.compile(r"[^\W_]+(?:'[^\W_]+)*")


def strip_accents(value: str) -> str:
    value = unicodedata.normalize('NFD', value)
    return ''.join(ch for ch in value if not unicodedata.combining(ch))


def search_text(value) -> str:
    """Lowercase and strip diacritics, as used by the search columns."""
    return strip_accents((value or '').lower()).strip()


def title_case(value) -> str:
    """``"  maría-JOSÉ pérez"`` -> ``"María José Pérez"``."""
    words = _WORD_RE.findall(str(value or '').lower())
    return ' '.join(w[:1].upper() + w[1:] for w in words)


def clean_text(value) -> str:
    return bleach.clean(str(value or '').strip(), tags=[], strip=True)


def clean_name(value):
    if value is None:
        return None
    return title_case(clean_text(value)) or None
