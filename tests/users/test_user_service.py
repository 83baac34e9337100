from __future__ import annotations

import pytest

from inkwell.errors import PermissionDenied, RecordInvalid, RecordNotFound
from inkwell.models import Article, User
from inkwell.services.passwords import verify_password
from inkwell.services.permissions import authorize, can_modify
from inkwell.services.user_service import ORIGINAL_PW_INCORRECT, PW_MISMATCH

PASSWORD = "correct horse battery"


def test_register_hashes_password_and_strips_handle(users) -> None:
    user = users.register("  ada  ", "s3cret-pass")

    assert user.handle == "ada"
    assert user.password_hash != "s3cret-pass"
    assert verify_password(user.password_hash, "s3cret-pass")
    assert users.authenticate(user, "wrong") is None


def test_register_rejects_taken_handle_and_blank_password(users, make_user) -> None:
    make_user("ada")

    with pytest.raises(RecordInvalid) as excinfo:
        users.register("ada", "")

    assert excinfo.value.errors["handle"] == ["has already been taken"]
    assert excinfo.value.errors["password"] == ["can't be blank"]


def test_password_mismatch_fails_without_checking_current_password(users, make_user, monkeypatch) -> None:
    user = make_user()
    checked: list[str] = []

    def spy_authenticate(candidate, password):
        checked.append(password)
        return candidate

    monkeypatch.setattr(users, "authenticate", spy_authenticate)

    with pytest.raises(RecordInvalid) as excinfo:
        users.change_password(user, current=PASSWORD, new="new-password", confirm="other-password")

    assert excinfo.value.errors["confirm"] == [PW_MISMATCH]
    assert checked == []


def test_wrong_current_password_is_rejected(users, make_user) -> None:
    user = make_user()
    original_hash = user.password_hash

    with pytest.raises(RecordInvalid) as excinfo:
        users.change_password(user, current="not it", new="new-password", confirm="new-password")

    assert excinfo.value.errors["current"] == [ORIGINAL_PW_INCORRECT]
    assert user.password_hash == original_hash


def test_password_change_succeeds_with_correct_current_and_matching_values(users, make_user, db) -> None:
    user = make_user()

    users.change_password(user, current=PASSWORD, new="new-password", confirm="new-password")

    db.expire_all()
    stored = db.get(User, user.id)
    assert verify_password(stored.password_hash, "new-password")
    assert not verify_password(stored.password_hash, PASSWORD)


def test_new_password_is_validated(users, make_user) -> None:
    user = make_user()

    with pytest.raises(RecordInvalid) as excinfo:
        users.change_password(user, current=PASSWORD, new="", confirm="")

    assert excinfo.value.errors["password"] == ["can't be blank"]


def test_update_profile_changes_handle_and_picture(users, make_user) -> None:
    user = make_user("ada")

    users.update_profile(user, handle="countess", profile_picture="abc.png")

    assert users.get(user.id).handle == "countess"
    assert user.profile_picture == "abc.png"


def test_update_profile_rejects_another_users_handle(users, make_user) -> None:
    make_user("grace")
    user = make_user("ada")

    with pytest.raises(RecordInvalid):
        users.update_profile(user, handle="grace")

    assert user.handle == "ada"


def test_keeping_own_handle_is_allowed(users, make_user) -> None:
    user = make_user("ada")

    assert users.update_profile(user, handle="ada").handle == "ada"


def test_destroying_user_leaves_articles_unauthored(users, make_user, make_article, db) -> None:
    user = make_user("ada")
    article = make_article(author=user)

    users.destroy(user)

    db.expire_all()
    assert db.get(User, user.id) is None
    remaining = db.get(Article, article.id)
    assert remaining is not None
    assert remaining.author_id is None


def test_get_unknown_user_raises_not_found(users) -> None:
    with pytest.raises(RecordNotFound):
        users.get(404)


def test_owner_or_admin_may_modify(make_user, make_article) -> None:
    ada, grace, admin = make_user("ada"), make_user("grace"), make_user("root", admin=True)
    article = make_article(author=ada)
    anonymous = make_article(author=ada, anonymous=True)

    assert can_modify(ada, article)
    assert can_modify(admin, article)
    assert can_modify(admin, anonymous)
    assert not can_modify(grace, article)
    assert not can_modify(ada, anonymous)
    assert not can_modify(None, article)
    assert can_modify(ada, ada)
    assert not can_modify(grace, ada)

    with pytest.raises(PermissionDenied):
        authorize(grace, article)
