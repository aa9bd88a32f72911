"""Tests for the gallery access guard."""
import bcrypt
import pytest
from fastapi import HTTPException
from unittest.mock import Mock

from olympics_gallery.application.services import AccessService, parse_year
from olympics_gallery.services import token_codec

NOW = 1_700_000_000
SECRET = "s" * 64
PASSWORD = "gold-medal"
PASSWORD_HASH = bcrypt.hashpw(PASSWORD.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")


def _olympics(password_hash=PASSWORD_HASH, secret=SECRET):
    return {
        "year": 2025,
        "event_name": "Summer Games",
        "gallery_password_hash": password_hash,
        "gallery_token_secret": secret,
    }


@pytest.fixture
def mock_olympics_repo():
    return Mock()


@pytest.fixture
def access_service(mock_olympics_repo):
    return AccessService(olympics_repository=mock_olympics_repo, clock=lambda: NOW)


@pytest.mark.parametrize("raw,expected", [
    ("2025", 2025),
    (2025, 2025),
    (" 2025 ", 2025),
    ("20x5", None),
    ("-2025", None),
    ("", None),
    ("2025.0", None),
])
def test_parse_year(raw, expected):
    assert parse_year(raw) == expected


class TestCheckAccess:

    def test_open_gallery_allows_without_token(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics(password_hash=None, secret=None)
        assert access_service.check_access("2025", None) is True

    def test_open_gallery_ignores_garbage_token(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics(password_hash=None, secret=None)
        assert access_service.check_access("2025", "garbage") is True

    def test_protected_gallery_requires_token(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics()
        assert access_service.check_access("2025", None) is False
        assert access_service.check_access("2025", "") is False

    def test_valid_token_allows(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics()
        token = token_codec.mint(SECRET, 2025, NOW + 60)
        assert access_service.check_access("2025", token) is True

    def test_expired_token_denied(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics()
        token = token_codec.mint(SECRET, 2025, NOW - 1)
        assert access_service.check_access("2025", token) is False

    def test_token_for_other_year_denied(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics()
        token = token_codec.mint(SECRET, 2024, NOW + 60)
        assert access_service.check_access("2025", token) is False

    def test_unknown_year_denied(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = None
        assert access_service.check_access("2030", None) is False

    def test_invalid_year_denied_without_lookup(self, access_service, mock_olympics_repo):
        assert access_service.check_access("abc", None) is False
        mock_olympics_repo.get.assert_not_called()

    def test_password_without_secret_fails_closed(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics(secret=None)
        token = token_codec.mint(SECRET, 2025, NOW + 60)
        assert access_service.check_access("2025", token) is False


class TestValidatePassword:

    def test_correct_password_mints_token(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics()

        result = access_service.validate_password("2025", PASSWORD)

        expires_at = NOW + 24 * 60 * 60
        assert result["expiresAt"] == expires_at * 1000
        assert token_codec.verify(SECRET, result["token"], "2025", NOW) is True

    def test_wrong_password(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics()
        with pytest.raises(HTTPException) as exc_info:
            access_service.validate_password("2025", "silver-medal")
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Invalid password"

    def test_missing_password(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics()
        with pytest.raises(HTTPException) as exc_info:
            access_service.validate_password("2025", None)
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Password is required"

    def test_invalid_year(self, access_service):
        with pytest.raises(HTTPException) as exc_info:
            access_service.validate_password("next-year", PASSWORD)
        assert exc_info.value.status_code == 400

    def test_unknown_year(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = None
        with pytest.raises(HTTPException) as exc_info:
            access_service.validate_password("2030", PASSWORD)
        assert exc_info.value.status_code == 404
        assert exc_info.value.detail == "Olympics year 2030 not found"

    def test_protected_without_secret_is_misconfigured(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics(secret=None)
        with pytest.raises(HTTPException) as exc_info:
            access_service.validate_password("2025", PASSWORD)
        assert exc_info.value.status_code == 500

    def test_open_gallery_without_secret_returns_empty_token(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics(password_hash=None, secret=None)
        result = access_service.validate_password("2025", None)
        assert result["token"] == ""
        assert result["expiresAt"] == (NOW + 24 * 60 * 60) * 1000

    def test_open_gallery_with_secret_mints_token(self, access_service, mock_olympics_repo):
        mock_olympics_repo.get.return_value = _olympics(password_hash=None)
        result = access_service.validate_password("2025", None)
        assert token_codec.verify(SECRET, result["token"], "2025", NOW) is True
