from datetime import date

from stk_community import config
from stk_community.models.institution import Institution, InstitutionDetail
from stk_community.schemas.article import Article
from stk_community.utils.listing import (
    NOT_AVAILABLE,
    NOT_SPECIFIED,
    file_kind,
    filter_articles,
    filter_institutions,
    format_file_size,
    search,
    to_card,
    toggle_filter,
)


def _card(inst_id, name, level=None, deadline=None):
    inst = Institution(id=inst_id, name=name, description="", location="Berlin", type="", image_url="")
    detail = InstitutionDetail(university_id=inst_id, language_requirements=level,
                               application_deadline=deadline)
    return to_card(inst, detail)


def _cards():
    return [
        _card("hd", "Studienkolleg Heidelberg", "B2"),
        _card("ka", "Studienkolleg KIT Karlsruhe", "B1"),
        _card("mu", "Studienkolleg München", "B2"),
        _card("ko", "Studienkolleg Köthen", "B1"),
    ]


def test_search_is_case_insensitive_subset():
    cards = _cards()
    result = search(cards, "KIT", key=lambda c: c.name)
    assert [c.id for c in result] == ["ka"]

    result = search(cards, "studienkolleg", key=lambda c: c.name)
    assert len(result) == len(cards)
    assert all("studienkolleg" in c.name.lower() for c in result)


def test_empty_search_keeps_everything():
    cards = _cards()
    assert search(cards, "", key=lambda c: c.name) == cards
    assert search(cards, None, key=lambda c: c.name) == cards


def test_level_toggles():
    cards = _cards()
    b1 = filter_institutions(cards, b1=True)
    b2 = filter_institutions(cards, b2=True)
    both = filter_institutions(cards, b1=True, b2=True)

    assert {c.id for c in b1} == {"ka", "ko"}
    assert {c.id for c in b2} == {"hd", "mu"}
    assert {c.id for c in both} == {c.id for c in b1} | {c.id for c in b2}
    assert filter_institutions(cards) == cards


def test_level_toggles_match_exact_values():
    cards = _cards() + [_card("lc", "Studienkolleg Lowercase", "b1")]
    assert "lc" not in {c.id for c in filter_institutions(cards, b1=True)}
    assert "lc" in {c.id for c in filter_institutions(cards)}


def test_search_and_level_combine():
    assert {c.id for c in filter_institutions(_cards(), "kö", b1=True)} == {"ko"}
    assert filter_institutions(_cards(), "kö", b2=True) == []


def test_null_deadline_is_not_specified():
    card = _card("x", "Studienkolleg X", deadline=None)
    assert card.bewerbung_ws == NOT_SPECIFIED
    assert card.bewerbung_ss == NOT_SPECIFIED


def test_deadline_split_by_semester():
    card = _card("x", "Studienkolleg X", deadline="1 Mai bis 30 Juni,  November bis 15 Dezember")
    assert card.bewerbung_ws == "1 Mai bis 30 Juni"
    assert card.bewerbung_ss == "November bis 15 Dezember"


def test_card_without_detail_row():
    inst = Institution(id="x", name="Studienkolleg X", description="", location="", type="", image_url="")
    card = to_card(inst, None)
    assert card.level == "B2"
    assert card.registration == NOT_AVAILABLE
    assert card.adresse == "Address not available"
    assert card.email == "Email not available"
    assert card.photo_url == config.DEFAULT_PHOTO_URL
    assert card.more_info == "#"


def test_toggle_filter_with_nothing_selected():
    items = ["a", "b"]
    assert toggle_filter(items, [], key=lambda s: s) == items
    assert toggle_filter(items, ["B"], key=lambda s: s) == ["b"]


def test_filter_articles_by_category_and_title():
    articles = [
        Article(id=1, title="Visa basics", content="...", created_at=date(2023, 1, 1), category="visa"),
        Article(id=2, title="Exam tips", content="...", created_at=date(2023, 2, 1), category="exams"),
        Article(id=3, title="Visa appointment", content="...", created_at=date(2023, 3, 1), category="visa"),
    ]
    assert [a.id for a in filter_articles(articles, "", "all")] == [1, 2, 3]
    assert [a.id for a in filter_articles(articles, "", "visa")] == [1, 3]
    assert [a.id for a in filter_articles(articles, "appointment", "visa")] == [3]
    assert filter_articles(articles, "visa", "exams") == []


def test_format_file_size():
    assert format_file_size(512) == "512 bytes"
    assert format_file_size(2048) == "2.0 KB"
    assert format_file_size(5 * 1024 * 1024 + 100 * 1024) == "5.1 MB"


def test_file_kind():
    assert file_kind("application/pdf") == "pdf"
    assert file_kind("application/msword") == "doc"
    assert file_kind("application/vnd.openxmlformats-officedocument.wordprocessingml.document") == "doc"
    assert file_kind("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet") == "xls"
    assert file_kind("application/vnd.ms-excel") == "xls"
    assert file_kind("image/png") == "file"
    assert file_kind(None) == "file"
