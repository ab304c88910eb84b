from datetime import datetime, timezone

import pytest

from records.seeds.dedupe import apply_patient_remap, deduplicate_patients
from records.seeds.dumps import number, oid, parse_date
from records.seeds.normalize import (
    clean_person_name,
    get_country,
    normalize_city,
    normalize_marital_status,
    normalize_phone_number,
    normalize_phone_type,
    province_to_iso,
    strip_class,
    strip_doctor_prefix,
    to_iso,
    transform_schedule,
)
from records.seeds.people import contact_data_seed, personal_data_seed
from records.seeds.stats import ProcessingStats


@pytest.mark.parametrize('raw,expected', [
    ('0297 4486030/44', ['tel:2974486044']),
    ('297 15 4048768', ['cel:2974048768']),
    ('297 154048768', ['cel:2974048768']),
    ('2974486030', ['tel:2974486030']),
    ('297154048768', ['cel:2974048768']),
    ('+54 9 297 4123456', ['tel:2974123456']),
    ('4486030 (casa)', ['tel:4486030']),
    ('4486030 - 154048768', ['tel:4486030', 'cel:154048768']),
    ('sin telefono', []),
])
def test_normalize_phone_number(raw, expected):
    assert normalize_phone_number(raw) == expected


def test_normalize_phone_number_empty():
    assert normalize_phone_number('') is None
    assert normalize_phone_number(None) is None


@pytest.mark.parametrize('raw,expected', [
    ('Chubut', 'AR-U'),
    ('CH', 'AR-U'),
    ('Santa Cruz', 'AR-Z'),
    ('Prov. de Chubut', 'AR-U'),
    ('Río Negro', 'AR-R'),
    ('Atlantis', None),
    ('', None),
])
def test_province_to_iso(raw, expected):
    assert province_to_iso(raw) == expected


@pytest.mark.parametrize('raw,expected', [
    ('Cdro. Rivadavia', 'comodoro rivadavia'),
    ('C. Rivadavia', 'comodoro rivadavia'),
    ('RADA TILLY', 'rada tilly'),
    ('rada tlly', 'rada tilly'),
    ('Caleta Olivia', 'caleta olivia'),
    ('Pto. Deseado', 'puerto deseado'),
    ('Trelew', 'trelew'),
    ('OSDE', None),
    ('   ', None),
])
def test_normalize_city(raw, expected):
    assert normalize_city(raw) == expected


def test_small_lookups():
    assert get_country('Argentina') == 'AR'
    assert get_country('cl') == 'CL'
    assert get_country('Chilena') == 'CL'
    assert get_country('Mars') is None
    assert normalize_marital_status('Casada') == 'married'
    assert normalize_marital_status('otro') is None
    assert normalize_phone_type('Celular') == 'cel'
    assert normalize_phone_type(None) is None
    assert strip_doctor_prefix('Dra Ana Perez') == 'Ana Perez'
    assert clean_person_name('jUAN  CARLOS') == 'Juan Carlos'
    assert clean_person_name('') is None


def test_transform_schedule_custom_shifts():
    schedule = transform_schedule({
        'schedule_all_week_shift_duration': '20',
        'schedule_all_week_custom_time': True,
        'schedule_all_shifts': {'1': {'start': '08:00', 'end': '12:00'}},
        'schedule_all_week_start_time': '09:00',
        'schedule_all_week_end_time': '17:00',
    })
    assert schedule['encounterDuration'] == 20
    assert (schedule['mondayStart'], schedule['mondayEnd']) == ('08:00', '12:00')
    assert (schedule['sundayStart'], schedule['sundayEnd']) == ('09:00', '17:00')


def test_transform_schedule_defaults():
    schedule = transform_schedule({'schedule_all_week_shift_duration': 'n/a',
                                   'schedule_all_shifts': {'1': {'start': '08:00'}}})
    assert schedule['encounterDuration'] == 15
    assert schedule['mondayStart'] is None
    assert len(schedule) == 15


def test_strip_class_and_iso():
    assert strip_class({'__class': 'Form', 'values': {'__class': 'V', 'a': 1}}) == {'values': {'a': 1}}
    moment = datetime(2024, 1, 2, 3, 4, 5, 678900, tzinfo=timezone.utc)
    assert to_iso(moment) == '2024-01-02T03:04:05.678Z'


def test_extended_json_helpers():
    assert oid({'$oid': 'abc'}) == 'abc'
    assert oid('abc') == 'abc'
    assert number({'$numberLong': '1700000000'}) == 1700000000.0
    assert number('n/a') is None
    assert parse_date({'$date': {'$numberLong': '0'}}) == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert parse_date({'$date': '2024-01-02T03:04:05Z'}) == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert parse_date('garbage') is None
    assert parse_date(None) is None


def test_people_seeds():
    personal = personal_data_seed(
        {'first_name': 'ANA', 'last_name': 'pérez', 'dob_year': 1980, 'dob_month': 5, 'dob_day': 2,
         'marital_status': 'Soltera', 'nationality': 'chilena'},
        'fallback',
    )
    assert personal['firstName'] == 'Ana'
    assert personal['lastName'] == 'Pérez'
    assert personal['birthDate'] == '1980-05-02T00:00:00.000Z'
    assert personal['documentValue'] == 'fallback'
    assert personal['nationality'] == 'CL'
    assert personal['maritalStatus'] == 'single'

    invalid = personal_data_seed({'first_name': 'x', 'dob_year': 1990, 'dob_month': 13, 'dob_day': 1}, 'd')
    assert invalid['birthDate'] is None

    contact = contact_data_seed({'city': 'Aysen', 'province': 'XI', 'phone_number': '2974486030'})
    assert contact['country'] == 'CL'
    assert contact['province'] is None
    assert contact['phoneNumber'] == ['tel:2974486030']
    assert contact_data_seed({'city': 'comodoro', 'province': 'chubut'})['province'] == 'AR-U'


def test_deduplicate_patients_keeps_first_live_record():
    patients = [
        {'_id': {'$oid': 'a'}, 'deleted': True, 'personal_data': {'document_value': '111'}},
        {'_id': {'$oid': 'b'}, 'personal_data': {'document_value': '111'}},
        {'_id': {'$oid': 'c'}, 'personal_data': {'document_value': '111'}},
        {'_id': {'$oid': 'd'}, 'deleted': True, 'personal_data': {'document_value': '222'}},
        {'_id': {'$oid': 'e'}, 'deleted': True, 'personal_data': {'document_value': '222'}},
        {'_id': {'$oid': 'f'}},
    ]
    result = deduplicate_patients(patients)
    assert [oid(p['_id']) for p in result.patients] == ['b', 'd', 'f']
    assert result.remap == {'c': 'b', 'a': 'b', 'e': 'd'}
    assert result.stats.reasons == {'non_deleted_duplicate': 1, 'soft_deleted_duplicate': 2}
    assert (result.stats.total, result.stats.kept, result.stats.discarded) == (6, 3, 3)

    encounters = [{'patient_id': 'c'}]
    studies = [{'patient': {'id': 'a'}}, {'patient': None}]
    apply_patient_remap(result.remap, encounters, [], studies)
    assert encounters[0]['patient_id'] == 'b'
    assert studies[0]['patient']['id'] == 'b'


def test_processing_stats_lines():
    stats = ProcessingStats(total=3, kept=2)
    stats.discard('missing_patient')
    stats.note('medic_reassigned')
    assert stats.lines('Encounters') == [
        '  Encounters: 2/3 kept, 1 discarded',
        '    - missing_patient: 1',
        '    - medic_reassigned: 1',
    ]


@pytest.mark.parametrize('raw,expected', [
    ('Germany', 'DE'),
    ('DE', 'DE'),
    ('deu', 'DE'),
    ('France', 'FR'),
    ('Japan', 'JP'),
    ('Alemana', 'DE'),
    ('México', 'MX'),
    ('Brasil', 'BR'),
    ('Bolivia', 'BO'),
])
def test_get_country_resolves_names_codes_and_demonyms(raw, expected):
    assert get_country(raw) == expected


def test_nationality_outside_the_region_is_kept():
    assert personal_data_seed({'first_name': 'Hans', 'nationality': 'Germany'}, 'd')['nationality'] == 'DE'
    assert personal_data_seed({'first_name': 'Ana', 'nationality': 'Atlantida'}, 'd')['nationality'] == 'AR'


def test_phone_label_follows_the_mobile_prefix():
    # only the "15" mobile prefix makes a number a cel; an area code alone is a landline
    assert normalize_phone_number('2974486030') == ['tel:2974486030']
    assert normalize_phone_number('02974486030') == ['tel:2974486030']
    assert normalize_phone_number('297 15 4486030') == ['cel:2974486030']
    assert normalize_phone_number('154486030') == ['cel:154486030']
    assert normalize_phone_number('4486030/6131') == ['tel:4486131']
