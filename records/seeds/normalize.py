"""
Cleanup helpers for the free-text fields of the legacy dumps.

The legacy system stored addresses and phone numbers exactly as the
front desk typed them, so most of what follows is a catalogue of the
variants that actually occur in the data.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

import pycountry

from records.services.text import strip_accents, title_case

PROVINCES = {
    'AR-A': ['salta'],
    'AR-B': ['buenos aires', 'ba'],
    'AR-C': ['ciudad autonoma de buenos aires', 'capital federal', 'caba', 'ciudad de buenos aires'],
    'AR-D': ['san luis'],
    'AR-E': ['entre rios'],
    'AR-F': ['la rioja'],
    'AR-G': ['santiago del estero'],
    'AR-H': ['chaco'],
    'AR-J': ['san juan'],
    'AR-K': ['catamarca'],
    'AR-L': ['la pampa'],
    'AR-M': ['mendoza'],
    'AR-N': ['misiones'],
    'AR-P': ['formosa'],
    'AR-Q': ['neuquen'],
    'AR-R': ['rio negro'],
    'AR-S': ['santa fe'],
    'AR-T': ['tucuman'],
    'AR-U': ['chubut', 'ch', 'cc', 'chu'],
    'AR-V': ['tierra del fuego'],
    'AR-W': ['corrientes', 'crr'],
    'AR-X': ['cordoba'],
    'AR-Y': ['jujuy'],
    'AR-Z': ['santa cruz', 'sc'],
}

CITY_JUNK = {'paulasa mendieta', 'osde', 'elaa', 'ch', 'los duraznos 853'}

CITIES = {
    'alto río senguer': ['rios senguer', 'rio senguer'],
    'aysen': ['aysen'],
    'caleta olivia': ['c olivia', 'calata olivia'],
    'cañadón seco': ['canadon seco'],
    'ciudad autonoma de buenos aires': ['caba', 'capital federal', 'ciudad de buenos aires'],
    'comandante luis piedrabuena': ['cl piedrabuena'],
    'comodoro rivadavia': ['cr', 'crd', 'com', 'com riv', 'c rivadavia', 'comodoro', 'comod', 'rivadav',
                           'omodoro', 'isidro quiroga'],
    'cushamen': ['cushamen'],
    'el bolsón': ['el bolson', 'bolson'],
    'gobernador gregores': ['g gregores'],
    'la plata': ['l plata', 'la plata', 'lp', 'l p'],
    'las heras': ['heras', 'herras', 'lasheras'],
    'perito moreno': ['p moreno', 'perito'],
    'pico truncado': ['truncado', 'pico truncado', 'p truncado', 'pido tuncado', 'p tuncado'],
    'puerto deseado': ['p deseado', 'pto deseado', 'p desrado', 'deseado', 'puertro deseado'],
    'puerto madryn': ['madryn'],
    'puerto san julián': ['san julian', 'p san julian', 'p san juliaqn'],
    'rada tilly': ['rt', 'rada tlly', 'rada btilly', 'radatilly', 'corada tilly', 'rda tilly', 'rda tily',
                   'r tilly', 'r rilly', 'tada tilly', 'rtada tilly', 'rasa tilly'],
    'río mayo': ['rio maryo', 'r mayo'],
    'sarmiento': ['sarrmiento', 'srmiento', 'sarmienbto', 'sarnmiento'],
    'san julián': ['san jualian'],
    'villa elisa': ['villa elisa', 'villa elis'],
    'epuyén': ['epuyen', 'epu'],
    'marcos juárez': ['marcos juarez'],
}

# Argentine long-distance prefixes without the trunk 0; longest first so
# "2966" wins over "296".
AREA_CODES = sorted({
    '11', '220', '221', '223', '230', '236', '237', '249', '260', '261', '263', '264', '266',
    '280', '291', '294', '297', '298', '299', '341', '342', '343', '345', '348', '351', '353',
    '358', '362', '364', '370', '376', '379', '380', '381', '383', '385', '387', '388',
    '2202', '2221', '2223', '2224', '2225', '2226', '2227', '2229', '2241', '2242', '2243',
    '2244', '2245', '2246', '2252', '2254', '2255', '2257', '2261', '2262', '2264', '2265',
    '2266', '2267', '2268', '2271', '2272', '2273', '2274', '2281', '2283', '2284', '2285',
    '2286', '2291', '2292', '2296', '2297', '2302', '2314', '2316', '2317', '2320', '2323',
    '2324', '2325', '2326', '2331', '2333', '2334', '2335', '2336', '2337', '2338', '2342',
    '2343', '2344', '2345', '2346', '2352', '2353', '2354', '2355', '2356', '2357', '2358',
    '2392', '2393', '2394', '2395', '2396', '2473', '2474', '2475', '2477', '2478', '2622',
    '2624', '2625', '2626', '2646', '2647', '2648', '2651', '2655', '2656', '2657', '2658',
    '2901', '2902', '2903', '2920', '2921', '2922', '2923', '2924', '2925', '2926', '2927',
    '2928', '2929', '2931', '2932', '2933', '2934', '2935', '2936', '2940', '2942', '2945',
    '2946', '2948', '2952', '2953', '2954', '2962', '2963', '2964', '2966', '2972', '2982',
    '2983',
}, key=lambda code: (-len(code), code))

# Spanish names and demonyms that pycountry does not know
COUNTRY_ALIASES = {
    'AR': ['argentino', 'republica argentina'],
    'BO': ['boliviano', 'boliviana'],
    'BR': ['brasil', 'brasileno', 'brasilena'],
    'CL': ['chileno', 'chilena'],
    'CO': ['colombiano', 'colombiana'],
    'DE': ['alemania', 'aleman', 'alemana'],
    'EC': ['ecuatoriano', 'ecuatoriana'],
    'ES': ['espana', 'espanol', 'espanola'],
    'FR': ['francia', 'frances', 'francesa'],
    'IT': ['italia', 'italiano', 'italiana'],
    'MX': ['mexico', 'mexicano', 'mexicana'],
    'PE': ['peruano', 'peruana'],
    'PY': ['paraguayo', 'paraguaya'],
    'US': ['estados unidos', 'eeuu', 'estadounidense'],
    'UY': ['uruguayo', 'uruguaya'],
    'VE': ['venezuela', 'venezolano', 'venezolana'],
}

MARITAL_STATUS = {
    'soltero': 'single',
    'soltera': 'single',
    'casado': 'married',
    'casada': 'married',
    'divorciado': 'divorced',
    'divorciada': 'divorced',
    'viudo': 'widowed',
    'viuda': 'widowed',
}

WEEKDAYS = ('sunday', 'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday')

_CITY_PUNCT_RE = re.compile(r'[.,º°\-_|>]')
_SPACES_RE = re.compile(r'\s+')
_DIGITS_RE = re.compile(r'\d+')
_PARENS_RE = re.compile(r'\s*\(.*?\)\s*')
_COUNTRY_PREFIX_RE = re.compile(r'^\+?54\s*9?')
_PHONE_SPLIT_RE = re.compile(r'[-/\s]+')


def _simplify(value) -> str:
    return strip_accents(str(value or '').lower().strip())


def province_to_iso(province) -> Optional[str]:
    """``"Chubut"`` -> ``"AR-U"``; unknown provinces give ``None``."""
    needle = _simplify(province)
    if not needle:
        return None
    for iso, variants in PROVINCES.items():
        if needle in variants:
            return iso
    for iso, variants in PROVINCES.items():
        if len(needle) > 3 and any(len(v) > 3 and (needle in v or v in needle) for v in variants):
            return iso
    return None


def _city_key(value) -> str:
    text = _CITY_PUNCT_RE.sub(' ', _simplify(value))
    text = _DIGITS_RE.sub('', _SPACES_RE.sub(' ', text))
    return _SPACES_RE.sub(' ', text).strip()


def normalize_city(city) -> Optional[str]:
    if not city or not str(city).strip():
        return None
    if str(city).strip().lower() in CITY_JUNK:
        return None

    needle = _city_key(city)
    if not needle:
        return None
    for name, variants in CITIES.items():
        if needle == _city_key(name) or needle in variants:
            return name
    for name, variants in CITIES.items():
        # single letters and two-letter codes only match exactly
        if len(needle) > 2 and any(len(v) > 2 and (needle in v or v in needle) for v in variants):
            return name
    if 'chacras' in needle or 'deseado' in needle:
        if 'olivia' in needle:
            return 'caleta olivia'
        if 'heras' in needle:
            return 'las heras'
    return str(city).lower().strip()


def normalize_phone_type(phone_type) -> Optional[str]:
    if not phone_type:
        return None
    return str(phone_type).lower().strip()[:3]


def _area_code_of(number: str) -> Optional[str]:
    for code in AREA_CODES:
        if number.startswith(code):
            return code
    return None


def normalize_phone_number(raw) -> Optional[list]:
    """Split a typed phone field into ``tel:``/``cel:`` entries.

    ``"0297 4486030/44"`` -> ``["tel:2974486044"]`` and
    ``"297 15 4048768"`` -> ``["cel:2974048768"]``.
    """
    if not raw:
        return None
    text = _PARENS_RE.sub(' ', str(raw)).strip()
    text = _COUNTRY_PREFIX_RE.sub('', text).strip()

    area = ''
    if text.startswith('0'):
        code = _area_code_of(text[1:])
        if code:
            area = code
            text = text[1 + len(code):]
    parts = [p for p in _PHONE_SPLIT_RE.split(text.strip()) if p]

    # "297 154048768" and "297 4486030": the area code typed as its own part
    if not area and len(parts) > 1 and parts[0] in AREA_CODES:
        area = parts.pop(0)
    if area and len(parts) > 1 and parts[0] == '15':
        parts = ['15' + parts[1]] + parts[2:]

    results = []
    for index, part in enumerate(parts):
        if not part.isdigit():
            continue
        code = _area_code_of(part) if len(part) >= 10 else None
        if code:
            rest = part[len(code):]
            if rest.startswith('15') and len(rest) > 8:
                results.append(f'cel:{code}{rest[2:]}')
            else:
                results.append(f'tel:{code}{rest}')
        elif part.startswith('15') and len(part) >= 8:
            results.append(f'cel:{area}{part[2:]}' if area else f'cel:{part}')
        elif index == 1 and len(part) in (2, 4) and results and results[-1].startswith('tel:'):
            # "4486030/44" and "4486030/6131" share the leading digits
            previous = results[-1][4:]
            results[-1] = f'tel:{previous[:-len(part)]}{part}'
        elif len(part) >= 6:
            if index == 0 and area:
                results.append(f'tel:{area}{part}')
                area = ''
            else:
                results.append(f'tel:{part}')
    return results


def normalize_marital_status(status) -> Optional[str]:
    if not status:
        return None
    return MARITAL_STATUS.get(str(status).lower().strip())


def get_country(value) -> Optional[str]:
    """Country name, demonym or ISO code -> ISO 3166 alpha-2."""
    needle = _simplify(value)
    if not needle:
        return None
    for iso, names in COUNTRY_ALIASES.items():
        if needle in names:
            return iso
    for candidate in dict.fromkeys((str(value).strip(), needle)):
        try:
            return pycountry.countries.lookup(candidate).alpha_2
        except LookupError:
            continue
    return None


def transform_schedule(user: dict) -> dict:
    duration = user.get('schedule_all_week_shift_duration')
    try:
        duration = int(duration)
    except (TypeError, ValueError):
        duration = 15

    shifts = user.get('schedule_all_shifts') or {}
    custom = bool(user.get('schedule_all_week_custom_time'))
    default_start = user.get('schedule_all_week_start_time') or None
    default_end = user.get('schedule_all_week_end_time') or None

    schedule = {'encounterDuration': duration}
    for index, day in enumerate(WEEKDAYS):
        shift = (shifts.get(str(index)) or shifts.get(index)) if custom else None
        if shift:
            schedule[f'{day}Start'] = shift.get('start') or None
            schedule[f'{day}End'] = shift.get('end') or None
        else:
            schedule[f'{day}Start'] = default_start
            schedule[f'{day}End'] = default_end
    return schedule


def strip_doctor_prefix(name: str) -> str:
    return name.replace('Dr ', '', 1).replace('Dra ', '', 1)


def clean_person_name(name) -> Optional[str]:
    if not name:
        return None
    return title_case(name) or None


def strip_class(value):
    """Drop the ``__class`` discriminator from nested legacy documents."""
    if isinstance(value, dict):
        return {k: strip_class(v) for k, v in value.items() if k != '__class'}
    return value


def to_iso(moment: datetime) -> str:
    """UTC timestamp with millisecond precision and a ``Z`` suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime('%Y-%m-%dT%H:%M:%S.') + f'{moment.microsecond // 1000:03d}Z'
