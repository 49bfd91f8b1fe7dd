def test_manage_commands(app, db_session, capsys):
    from backend import manage
    from backend.portal.models.admin import AdminAccount
    from backend.portal.models.user import User

    assert manage.main(["create-admin", "--email", "Boss@Example.com", "--password", "short"]) == 1
    assert "8 characters" in capsys.readouterr().out

    assert manage.main(["create-admin", "--email", "Boss@Example.com", "--password", "Longenough1!"]) == 0
    assert db_session.query(AdminAccount).filter(AdminAccount.email == "boss@example.com").count() == 1
    assert manage.main(["create-admin", "--email", "boss@example.com", "--password", "Longenough1!"]) == 1

    assert manage.main(["register-candidate", "--phone", "not a phone"]) == 1
    assert manage.main(["register-candidate", "--phone", "+1 555 0003", "--email", "Sam@Example.com"]) == 0
    user = db_session.query(User).filter(User.phone == "+15550003").one()
    assert user.email == "sam@example.com"

    assert manage.main(["purge-expired"]) == 0
    assert "Purged 0" in capsys.readouterr().out
