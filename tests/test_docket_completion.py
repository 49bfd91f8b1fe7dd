import pytest

from conftest import FULL_DOCKET, candidate_headers, login_candidate


def _full_update(**overrides):
    from backend.portal.schemas.docket import DocketUpdate

    return DocketUpdate(**{**FULL_DOCKET, **overrides})


def test_missing_docket_reports_every_required_slot():
    from backend.portal.services.docket_service import REQUIRED_SLOTS, is_complete, missing_required_slots

    assert missing_required_slots(None) == [api for _, api in REQUIRED_SLOTS]
    assert is_complete(None) is False


def test_completeness_ignores_optional_collections(db_session, candidate):
    from backend.portal.schemas.docket import DocketUpdate
    from backend.portal.services.docket_service import is_complete, update_docket

    docket = update_docket(db_session, candidate.id, _full_update())
    assert is_complete(docket)

    docket = update_docket(
        db_session,
        candidate.id,
        DocketUpdate(
            passportVisaUrls=["https://blobs.example.com/visa.pdf"],
            educationFiles=[{"name": "degree.pdf", "url": "https://blobs.example.com/degree.pdf", "size": 10}],
            references=[{"fullName": "Sam Ref", "company": "Acme"}],
        ),
    )
    assert is_complete(docket)

    docket = update_docket(db_session, candidate.id, DocketUpdate(passportVisaUrls=[], references=[]))
    assert is_complete(docket)


def test_only_current_address_missing(db_session, candidate):
    from backend.portal.services.docket_service import missing_required_slots, update_docket

    docket = update_docket(db_session, candidate.id, _full_update(currentAddressUrl=None))
    assert missing_required_slots(docket) == ["currentAddressUrl"]


def test_blank_url_counts_as_missing(db_session, candidate):
    from backend.portal.services.docket_service import missing_required_slots, update_docket

    docket = update_docket(db_session, candidate.id, _full_update(passportPhotoUrl="   "))
    assert docket.passport_photo_url is None
    assert missing_required_slots(docket) == ["passportPhotoUrl"]


def test_partial_update_leaves_other_fields_alone(db_session, candidate):
    from backend.portal.schemas.docket import DocketUpdate
    from backend.portal.services.docket_service import docket_to_public, update_docket

    update_docket(db_session, candidate.id, _full_update())
    docket = update_docket(db_session, candidate.id, DocketUpdate(resumeUrl="https://blobs.example.com/cv.pdf"))

    public = docket_to_public(docket)
    assert public["resumeUrl"] == "https://blobs.example.com/cv.pdf"
    assert public["passportFrontUrl"] == FULL_DOCKET["passportFrontUrl"]
    assert public["missing"] == []
    assert public["isComplete"] is True


def test_complete_rejects_incomplete_docket(db_session, candidate):
    from backend.portal.services.docket_service import complete_docket, update_docket
    from backend.portal.utils.error_handlers import IncompleteDocketError

    update_docket(db_session, candidate.id, _full_update(currentAddressUrl=None))

    with pytest.raises(IncompleteDocketError) as exc:
        complete_docket(db_session, candidate.id)
    assert exc.value.status_code == 409
    assert exc.value.details == {"missing": ["currentAddressUrl"]}

    db_session.refresh(candidate)
    assert candidate.docket_completed is False


def test_complete_without_any_docket_lists_all_slots(db_session, candidate):
    from backend.portal.services.docket_service import REQUIRED_SLOTS, complete_docket
    from backend.portal.utils.error_handlers import IncompleteDocketError

    with pytest.raises(IncompleteDocketError) as exc:
        complete_docket(db_session, candidate.id)
    assert exc.value.missing == [api for _, api in REQUIRED_SLOTS]


def test_complete_is_idempotent(db_session, candidate):
    from backend.portal.services.docket_service import complete_docket, update_docket

    update_docket(db_session, candidate.id, _full_update())

    first = complete_docket(db_session, candidate.id)
    assert first.docket_completed is True
    assert first.already_completed is False

    second = complete_docket(db_session, candidate.id)
    assert second.docket_completed is True
    assert second.already_completed is True

    db_session.refresh(candidate)
    assert candidate.docket_completed is True


def test_completed_flag_survives_later_slot_removal(db_session, candidate):
    from backend.portal.services.docket_service import complete_docket, update_docket

    update_docket(db_session, candidate.id, _full_update())
    complete_docket(db_session, candidate.id)

    update_docket(db_session, candidate.id, _full_update(offerLetterUrl=""))
    db_session.refresh(candidate)
    assert candidate.docket_completed is True
    assert complete_docket(db_session, candidate.id).already_completed is True


def test_complete_unknown_user_is_not_found(db_session):
    from backend.portal.services.docket_service import complete_docket
    from backend.portal.utils.error_handlers import NotFoundError

    with pytest.raises(NotFoundError):
        complete_docket(db_session, "00000000-0000-0000-0000-000000000000")


def test_docket_http_round_trip_and_complete(client, notifier, candidate):
    token = login_candidate(client, notifier)
    headers = candidate_headers(token)

    r = client.get("/docket", headers=headers)
    assert r.status_code == 200
    assert r.json()["docket"] is None

    r = client.patch("/docket", json={**FULL_DOCKET, "currentAddressUrl": None}, headers=headers)
    assert r.status_code == 200
    assert r.json()["docket"]["missing"] == ["currentAddressUrl"]

    r = client.post(f"/docket/{candidate.id}/complete", headers=headers)
    assert r.status_code == 409
    body = r.json()
    assert body["success"] is False
    assert body["code"] == "INCOMPLETE_DOCKET"
    assert body["details"] == {"missing": ["currentAddressUrl"]}

    client.patch("/docket", json={"currentAddressUrl": FULL_DOCKET["currentAddressUrl"]}, headers=headers)
    r = client.post(f"/docket/{candidate.id}/complete", headers=headers)
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "userId": candidate.id,
        "docketCompleted": True,
        "alreadyCompleted": False,
    }

    r = client.post(f"/docket/{candidate.id}/complete", headers=headers)
    assert r.status_code == 200
    assert r.json()["alreadyCompleted"] is True

    r = client.get("/auth/user", headers=headers)
    assert r.json()["docketCompleted"] is True


def test_candidate_cannot_complete_someone_elses_docket(client, notifier, db_session, candidate):
    from backend.portal.services.docket_service import update_docket
    from backend.portal.services.user_service import register_candidate

    other = register_candidate(db_session, phone="+15550002")
    update_docket(db_session, other.id, _full_update())

    token = login_candidate(client, notifier)
    r = client.post(f"/docket/{other.id}/complete", headers=candidate_headers(token))
    assert r.status_code == 403
    assert r.json()["code"] == "FORBIDDEN"

    db_session.refresh(other)
    assert other.docket_completed is False
