from typing import Iterable, List, Optional, TypeVar

T = TypeVar("T")


def _clean(value) -> str:
    if value is None:
        return ""
    return str(getattr(value, "value", value)).strip()


def filter_papers(
    papers: Iterable[T],
    year: Optional[str] = None,
    semester: Optional[str] = None,
    term: Optional[str] = None,
    subject: Optional[str] = None,
) -> List[T]:
    """
    Applies the paper filters together (AND).

    year, semester and term must match exactly (compared as trimmed strings);
    subject is a case-insensitive substring match. Blank filters are ignored.
    Works on anything exposing `year`, `semester`, `term` and `subject`
    attributes, so both stored papers and API responses can be filtered.
    """
    year, semester, term = _clean(year), _clean(semester), _clean(term)
    subject_query = _clean(subject).lower()

    filtered = list(papers)
    if year:
        filtered = [p for p in filtered if _clean(p.year) == year]
    if semester:
        filtered = [p for p in filtered if _clean(p.semester) == semester]
    if term:
        filtered = [p for p in filtered if _clean(p.term) == term]
    if subject_query:
        filtered = [p for p in filtered if subject_query in p.subject.lower()]
    return filtered
