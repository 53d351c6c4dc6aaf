from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional

DETAIL_FIELDS = (
    "address", "email", "website_url", "bundesland", "kurse", "application_method",
    "application_deadline", "application_test_date", "language_requirements", "status",
)


class InstitutionCard(BaseModel):
    """Flat display record for listing cards and the detail page."""
    id: str
    name: str
    description: str
    location: str
    type: str
    registration: str
    level: str
    bewerbung_ws: str
    bewerbung_ss: str
    aufnahme_ws: str
    aufnahme_ss: str
    adresse: str
    email: str
    bundesland: str
    kurse: str
    status: str
    photo_url: str
    more_info: str


class InstitutionForm(BaseModel):
    # universities
    name: str
    description: str = ""
    location: str = ""
    type: str = ""
    image_url: str = ""
    # university_details
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    website_url: Optional[str] = None
    bundesland: Optional[str] = None
    kurse: Optional[str] = None
    application_method: Optional[str] = None
    application_deadline: Optional[str] = None
    application_test_date: Optional[str] = None
    language_requirements: Optional[str] = None
    status: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("University name is required")
        return v.strip()

    @field_validator(*DETAIL_FIELDS, mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        # HTML forms send "" for untouched inputs
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def institution_fields(self) -> dict:
        return {k: getattr(self, k) for k in ("name", "description", "location", "type", "image_url")}

    def detail_fields(self) -> dict:
        fields = self.model_dump(include=set(DETAIL_FIELDS))
        if fields.get("email") is not None:
            fields["email"] = str(fields["email"])
        return fields
