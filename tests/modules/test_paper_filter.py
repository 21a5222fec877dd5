import pytest
from types import SimpleNamespace

from studysync.modules.paper_filter import filter_papers
from studysync.models.db_models import Term


def paper(subject, year, semester, term):
    return SimpleNamespace(subject=subject, year=year, semester=semester, term=term)


@pytest.fixture
def papers():
    return [
        paper("Operating Systems", 2023, 5, Term.END_SEM),
        paper("Computer Networks", 2023, 5, Term.MID_SEM),
        paper("Operating Systems", 2022, 4, Term.MID_SEM),
        paper("Discrete Mathematics", 2021, 1, Term.END_SEM),
    ]


def test_no_filters_returns_everything(papers):
    assert filter_papers(papers) == papers


def test_blank_filters_are_ignored(papers):
    assert filter_papers(papers, year="  ", semester="", term=None, subject=" ") == papers


def test_subject_is_case_insensitive_substring(papers):
    result = filter_papers(papers, subject="  SYSTEMS ")
    assert [p.year for p in result] == [2023, 2022]


def test_year_and_semester_match_exactly_as_strings(papers):
    assert filter_papers(papers, year="2023", semester="5") == papers[:2]
    assert filter_papers(papers, year="202") == []


def test_term_matches_enum_or_plain_string(papers):
    assert filter_papers(papers, term="MidSem") == [papers[1], papers[2]]
    assert filter_papers(papers, term=Term.END_SEM) == [papers[0], papers[3]]


def test_all_filters_compose(papers):
    result = filter_papers(papers, year="2023", semester="5", term="EndSem", subject="operating")
    assert result == [papers[0]]


def test_filters_work_on_plain_string_fields():
    """API responses carry the same fields, possibly as strings."""
    items = [paper("Maths", "2020", "2", "MidSem"), paper("Maths", "2021", "2", "MidSem")]
    assert filter_papers(items, year="2021") == [items[1]]
