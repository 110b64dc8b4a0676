import pytest

from errors import ExpiredToken, InvalidCredential, InvalidToken, ValidationError


def test_admin_login_is_case_insensitive_on_id(auth):
    result = auth.login("ADMIN", "admin123")
    assert result.role == "admin"
    assert result.user.name == "Admin"


def test_staff_login(auth):
    result = auth.login("S002", "password2")
    assert result.role == "staff"
    assert result.user.id == "S002"


@pytest.mark.parametrize("user_id, password", [
    ("admin", "wrong"),
    ("S002", "password3"),
    ("s002", "password2"),
    ("S999", "password2"),
])
def test_bad_login_has_no_role(auth, user_id, password):
    result = auth.login(user_id, password)
    assert result.role is None
    assert result.user is None


def test_change_admin_password(auth, repo, store):
    auth.change_admin_password("admin123", "milk-2024", "milk-2024")

    assert repo.admin_password == "milk-2024"
    assert store.get("adminPassword", None) == "milk-2024"
    assert auth.login("admin", "milk-2024").role == "admin"


def test_change_admin_password_wrong_old(auth, repo):
    with pytest.raises(InvalidCredential):
        auth.change_admin_password("nope", "milk-2024")
    assert repo.admin_password == "admin123"


def test_change_admin_password_confirm_mismatch(auth):
    with pytest.raises(ValidationError):
        auth.change_admin_password("admin123", "milk-2024", "milk-2025")


def test_reset_request_requires_admin_id(auth):
    with pytest.raises(InvalidCredential):
        auth.request_password_reset("S001")


def test_reset_token_shape(auth, clock):
    reset = auth.request_password_reset("Admin")
    assert len(reset.token) == 6
    assert reset.token.isalnum() and reset.token == reset.token.upper()
    assert (reset.expiry - clock()).total_seconds() == 300


def test_reset_before_expiry_succeeds_once(auth, repo, clock):
    token = auth.request_password_reset("admin").token
    clock.advance(minutes=4, seconds=59)

    auth.reset_password(token, "fresh-pass")

    assert repo.admin_password == "fresh-pass"
    with pytest.raises(InvalidToken):
        auth.reset_password(token, "again")


def test_reset_after_expiry_reports_expired_then_invalid(auth, repo, clock):
    token = auth.request_password_reset("admin").token
    clock.advance(minutes=5, seconds=1)

    with pytest.raises(ExpiredToken):
        auth.reset_password(token, "fresh-pass")
    with pytest.raises(InvalidToken):
        auth.reset_password(token, "fresh-pass")
    assert repo.admin_password == "admin123"


def test_reset_with_wrong_token(auth):
    token = auth.request_password_reset("admin").token
    with pytest.raises(InvalidToken):
        auth.reset_password(token + "X", "fresh-pass")


def test_reset_without_request(auth):
    with pytest.raises(InvalidToken):
        auth.reset_password("ABC123", "fresh-pass")


def test_new_request_replaces_old_token(auth, monkeypatch):
    tokens = iter(["AAAAAA", "BBBBBB"])
    monkeypatch.setattr("auth.generate_token", lambda: next(tokens))
    auth.request_password_reset("admin")
    auth.request_password_reset("admin")

    with pytest.raises(InvalidToken):
        auth.reset_password("AAAAAA", "fresh-pass")
    auth.reset_password("BBBBBB", "fresh-pass")


def test_reset_confirm_mismatch_keeps_token(auth, repo):
    token = auth.request_password_reset("admin").token
    with pytest.raises(ValidationError):
        auth.reset_password(token, "a", "b")
    auth.reset_password(token, "a", "a")
    assert repo.admin_password == "a"
