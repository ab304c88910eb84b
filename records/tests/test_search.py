import pytest

from records.models import Patient, PersonalData
from records.services.search import has_search, rank_personal_data, ranked_patient_ids, score, word_similarity
from records.services.text import clean_name, search_text, title_case


def person(first, last, document=None):
    return PersonalData(search_first_name=first, search_last_name=last, document_value=document)


def test_text_helpers():
    assert search_text('  MARÍA José ') == 'maria jose'
    assert title_case('  maría-JOSÉ pérez') == 'María José Pérez'
    assert title_case("o'BRIEN") == "O'brien"
    assert clean_name('<b>juan</b>  carlos') == 'Juan Carlos'
    assert clean_name('   ') is None
    assert clean_name(None) is None


def test_exact_full_name_outranks_partial_match():
    exact, _ = score(person('ana', 'perez'), ['ana', 'perez'], 'ana perez', None)
    partial, _ = score(person('anabel', 'paredes'), ['ana', 'perez'], 'ana perez', None)
    assert exact > partial
    # full name 200 + phrase in first/last 0 + two exact terms
    assert exact >= 300


def test_document_match_makes_candidate():
    rank, candidate = score(person('x', 'y', '20111222'), ['20111222'], '20111222', '20111222')
    assert candidate
    assert rank >= 150


def test_unrelated_name_is_not_candidate():
    _, candidate = score(person('juan', 'lopez'), ['maria'], 'maria', None)
    assert not candidate


def test_typo_still_matches_by_similarity():
    assert word_similarity('gonzales', 'gonzalez') > 0.6
    _, candidate = score(person('martin', 'gonzalez'), ['gonzales'], 'gonzales', None)
    assert candidate


def test_has_search():
    assert has_search({'q': 'ana'})
    assert has_search({'birthDate': '1980-01-01'})
    assert not has_search({'q': '', '$limit': '10'})


@pytest.mark.django_db
def test_ranked_search_orders_patients_and_matches_birth_date():
    ana = Patient.objects.create(personal_data=PersonalData.objects.create(
        first_name='Ana', last_name='Pérez', birth_date='1980-05-02T12:00:00Z'))
    anabel = Patient.objects.create(personal_data=PersonalData.objects.create(
        first_name='Anabel', last_name='Peralta'))
    Patient.objects.create(personal_data=PersonalData.objects.create(first_name='Juan', last_name='Lopez'))

    assert ranked_patient_ids({'q': 'Ana Perez'})[:2] == [ana.id, anabel.id]
    assert ranked_patient_ids({'lastName': 'perez'})[0] == ana.id
    assert rank_personal_data({'birthDate': '1980-05-02'}) == [ana.personal_data_id]
    assert ranked_patient_ids({'q': 'zzz'}) == []


@pytest.mark.django_db
def test_birth_date_search_matches_midnight_utc_seed_dates():
    from records.seeds.people import birth_date

    seeded = birth_date({'dob_year': 1980, 'dob_month': 5, 'dob_day': 2})
    assert seeded == '1980-05-02T00:00:00.000Z'
    pd = PersonalData.objects.create(first_name='Rosa', last_name='Diaz', birth_date=seeded)
    PersonalData.objects.create(first_name='Eva', last_name='Diaz', birth_date='1980-05-03T00:00:00Z')

    assert rank_personal_data({'birthDate': '1980-05-02'}) == [pd.id]
    assert rank_personal_data({'birthDate': '1980-05-02T00:00:00.000Z'}) == [pd.id]
    assert rank_personal_data({'birthDate': '1980-13-45'}) == []
