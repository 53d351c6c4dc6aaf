import pytest
from pydantic import ValidationError

from stk_community.schemas.institution import InstitutionForm
from stk_community.schemas.page_content import InformationForm, extract_video_id, is_youtube_url


@pytest.mark.parametrize("url", [
    "",
    "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
    "youtube.com/watch?v=dQw4w9WgXcQ",
    "https://youtu.be/dQw4w9WgXcQ",
])
def test_youtube_urls_accepted(url):
    assert is_youtube_url(url)


@pytest.mark.parametrize("url", [
    "https://vimeo.com/12345",
    "https://www.youtube.com/watch?v=short",
    "https://youtu.be/dQw4w9WgXcQ/extra",
])
def test_other_urls_rejected(url):
    assert not is_youtube_url(url)
    with pytest.raises(ValidationError):
        InformationForm(video_url=url)


def test_extract_video_id():
    assert extract_video_id("https://youtu.be/dQw4w9WgXcQ") == "dQw4w9WgXcQ"
    assert extract_video_id(None) == ""
    assert InformationForm(title="t", video_url="").values()["video_url"] is None


def test_institution_form_blank_details_become_null():
    form = InstitutionForm(name="  Studienkolleg Y ", address="", email="", kurse="T")
    assert form.name == "Studienkolleg Y"
    details = form.detail_fields()
    assert details["address"] is None
    assert details["email"] is None
    assert details["kurse"] == "T"
    assert form.institution_fields()["name"] == "Studienkolleg Y"
