import pytest
from fastapi import HTTPException

from backend.portal.utils.error_handlers import (
    AppError,
    ForbiddenError,
    IncompleteDocketError,
    ValidationError,
    WrongPrincipalKindError,
    handle_database_error,
    http_error_code,
)
from backend.portal.utils.security import (
    generate_numeric_code,
    generate_session_token,
    hash_password,
    verify_password,
)
from backend.portal.utils.validation import (
    is_email_identifier,
    normalize_document_url,
    normalize_identifier,
    normalize_phone,
    validate_contract_status,
    validate_email,
    validate_phone,
    validate_work_permit_status,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("+15550001", "+15550001"),
        ("+1 (555) 000-1", "+15550001"),
        ("555.000.1234", "5550001234"),
        ("  JANE@Example.COM ", "jane@example.com"),
        ("", None),
        (None, None),
        (15550001, None),
        ("12345", None),
        ("+1234567890123456", None),
        ("jane@", None),
        ("hello world", None),
    ],
)
def test_normalize_identifier(raw, expected):
    assert normalize_identifier(raw) == expected


def test_is_email_identifier():
    assert is_email_identifier("jane@example.com")
    assert not is_email_identifier("+15550001")


def test_validate_phone_raises_400():
    assert validate_phone("+44 20 7946 0958") == "+442079460958"
    assert normalize_phone("abc") is None
    with pytest.raises(HTTPException) as exc:
        validate_phone("abc")
    assert exc.value.status_code == 400


def test_validate_email():
    assert validate_email("  TEST@EXAMPLE.COM  ") == "test@example.com"
    with pytest.raises(HTTPException):
        validate_email("invalid")


def test_normalize_document_url():
    assert normalize_document_url(None, "slot") is None
    assert normalize_document_url("   ", "slot") is None
    assert normalize_document_url(" https://x.example/a.pdf ", "slot") == "https://x.example/a.pdf"
    with pytest.raises(HTTPException):
        normalize_document_url(42, "slot")
    with pytest.raises(HTTPException):
        normalize_document_url("https://x.example/" + "a" * 1000, "slot")


def test_validate_contract_status():
    assert validate_contract_status(None) is None
    assert validate_contract_status(" Signed ") == "signed"
    with pytest.raises(HTTPException) as exc:
        validate_contract_status("archived", "jobOfferStatus")
    assert "jobOfferStatus" in exc.value.detail


def test_password_hash_round_trip():
    hashed = hash_password("Adminpass123!")
    assert verify_password("Adminpass123!", hashed)
    assert not verify_password("adminpass123!", hashed)
    assert not verify_password("", hashed)
    assert not verify_password("Adminpass123!", None)
    assert not verify_password("Adminpass123!", "not-a-bcrypt-hash")


def test_hash_password_rejects_empty_and_oversized():
    with pytest.raises(ValueError):
        hash_password("")
    with pytest.raises(ValueError):
        hash_password("x" * 73)


def test_generated_codes_and_tokens():
    codes = {generate_numeric_code(6) for _ in range(50)}
    assert all(len(c) == 6 and c.isdigit() for c in codes)
    assert len(codes) > 1
    assert generate_session_token() != generate_session_token()


def test_error_kinds_carry_stable_codes():
    wrong = WrongPrincipalKindError(expected="admin", actual="candidate")
    assert isinstance(wrong, ForbiddenError)
    assert wrong.code == "WRONG_PRINCIPAL_KIND"
    assert wrong.status_code == 403

    incomplete = IncompleteDocketError(["offerLetterUrl"])
    assert incomplete.code == "INCOMPLETE_DOCKET"
    assert incomplete.details == {"missing": ["offerLetterUrl"]}


def test_database_errors_map_to_generic_kinds():
    assert isinstance(handle_database_error(Exception("UNIQUE constraint failed: users.phone")), ValidationError)
    assert handle_database_error(Exception("connection refused")).code == "SERVICE_UNAVAILABLE"
    generic = handle_database_error(Exception("something odd"))
    assert type(generic) is AppError
    assert generic.status_code == 500


def test_http_error_code():
    assert http_error_code(HTTPException(status_code=400)) == "VALIDATION_ERROR"
    assert http_error_code(HTTPException(status_code=401)) == "UNAUTHENTICATED"
    assert http_error_code(HTTPException(status_code=418)) == "SERVER_ERROR"


def test_validate_work_permit_status():
    assert validate_work_permit_status(None) is None
    assert validate_work_permit_status("Approved") == "approved"
    assert validate_work_permit_status("awaiting decision") == "awaiting_decision"
    with pytest.raises(HTTPException):
        validate_work_permit_status("pending")
