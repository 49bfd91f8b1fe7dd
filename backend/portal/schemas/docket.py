from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    # Frontend speaks camelCase; accept snake_case too for scripts/tests.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DocumentFile(_CamelModel):
    name: str = ""
    url: str
    size: int = 0


class Reference(_CamelModel):
    full_name: str = ""
    company: str = ""
    designation: str = ""
    phone: str = ""
    email: str = ""


class DocketUpdate(_CamelModel):
    """Partial docket update. Omitted fields are untouched; blank slot URLs clear the slot."""
    passport_front_url: str | None = None
    passport_last_url: str | None = None
    passport_photo_url: str | None = None
    offer_letter_url: str | None = None
    permanent_address_url: str | None = None
    current_address_url: str | None = None
    resume_url: str | None = None

    passport_visa_urls: list[str] | None = None
    education_files: list[DocumentFile] | None = None
    experience_files: list[DocumentFile] | None = None
    other_certifications: list[DocumentFile] | None = None
    references: list[Reference] | None = None


class CompletionResult(_CamelModel):
    user_id: str
    docket_completed: bool = True
    already_completed: bool = False
