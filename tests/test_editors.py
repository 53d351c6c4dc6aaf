import pytest

from stk_community.models.page_content import ABOUT_PAGE, DOCUMENTS_PAGE, PageContent
from stk_community.schemas.page_content import FAQItem, PreparationStep
from stk_community.utils.content import (
    KEEP_ONE_FAQ,
    KEEP_ONE_ITEM,
    KEEP_ONE_STEP,
    ListGuardError,
    apply_list_action,
    load_documents_page,
    parse_documents_form,
    save_page,
)


def _lists():
    faqs = [FAQItem(question="Q1", answer="A1"), FAQItem(question="Q2", answer="A2")]
    steps = [PreparationStep(title="Passport", required_items=["copy", "photo"])]
    return faqs, steps


def test_remove_last_faq_is_rejected():
    faqs = [FAQItem(question="only")]
    with pytest.raises(ListGuardError, match=KEEP_ONE_FAQ):
        apply_list_action("remove_faq:0", faqs, [PreparationStep()])
    assert len(faqs) == 1


def test_remove_last_step_is_rejected():
    with pytest.raises(ListGuardError, match=KEEP_ONE_STEP):
        apply_list_action("remove_step:0", [FAQItem()], [PreparationStep(title="only")])


def test_remove_last_required_item_is_rejected():
    steps = [PreparationStep(title="s", required_items=["one"])]
    with pytest.raises(ListGuardError, match=KEEP_ONE_ITEM):
        apply_list_action("remove_item:0:0", [FAQItem()], steps)
    assert steps[0].required_items == ["one"]


def test_add_and_remove_actions():
    faqs, steps = _lists()

    faqs2, _ = apply_list_action("add_faq", faqs, steps)
    assert len(faqs2) == 3 and faqs2[-1].question == ""

    faqs3, _ = apply_list_action("remove_faq:0", faqs, steps)
    assert [f.question for f in faqs3] == ["Q2"]

    _, steps2 = apply_list_action("add_item:0", faqs, steps)
    assert steps2[0].required_items == ["copy", "photo", ""]
    assert steps[0].required_items == ["copy", "photo"]

    _, steps3 = apply_list_action("remove_item:0:1", faqs, steps)
    assert steps3[0].required_items == ["copy"]

    _, steps4 = apply_list_action("add_step", faqs, steps)
    assert len(steps4) == 2 and steps4[1].required_items == [""]


def test_unknown_action():
    faqs, steps = _lists()
    with pytest.raises(ValueError):
        apply_list_action("explode", faqs, steps)
    with pytest.raises(IndexError):
        apply_list_action("add_item:5", faqs, steps)


def test_parse_documents_form_keeps_order():
    form = {
        "faqs-1-question": "Second?",
        "faqs-1-answer": "B",
        "faqs-0-question": "First?",
        "faqs-0-answer": "A",
        "steps-0-title": "Translate",
        "steps-0-description": "Certified translations",
        "steps-0-items-1": "Transcript",
        "steps-0-items-0": "Diploma",
        "action": "save",
    }
    faqs, steps = parse_documents_form(form)
    assert [f.question for f in faqs] == ["First?", "Second?"]
    assert steps[0].title == "Translate"
    assert steps[0].required_items == ["Diploma", "Transcript"]


def test_parse_empty_form_gives_defaults():
    faqs, steps = parse_documents_form({})
    assert len(faqs) == 1 and len(steps) == 1
    assert steps[0].required_items == [""]


def test_save_twice_inserts_then_updates(db):
    values = {"mission": "Helping students find their way", "story": "Started in 2023"}
    row, created = save_page(db, ABOUT_PAGE, values)
    assert created is True

    row2, created2 = save_page(db, ABOUT_PAGE, {**values, "story": "Rewritten story"})
    assert created2 is False
    assert row2.id == row.id
    assert row2.story == "Rewritten story"
    assert db.query(PageContent).filter(PageContent.page_name == ABOUT_PAGE).count() == 1


def test_documents_page_round_trip(db):
    faqs, steps = _lists()
    row, _ = save_page(db, DOCUMENTS_PAGE, {
        "faqs": [f.model_dump() for f in faqs],
        "preparation_steps": [s.model_dump() for s in steps],
    })
    loaded_faqs, loaded_steps = load_documents_page(row)
    assert loaded_faqs == faqs
    assert loaded_steps == steps


def test_load_documents_page_defaults():
    faqs, steps = load_documents_page(None)
    assert faqs == [FAQItem()]
    assert steps == [PreparationStep()]
