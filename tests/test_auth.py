from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt

from kinship.config import Settings
from kinship.errors import UnauthorizedError
from kinship.services.auth import (
    Authenticator,
    ExpiredCredentialError,
    MalformedCredentialError,
    MissingCredentialError,
    WrongSigningSchemeError,
)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.unit
class TestAuthenticator:
    def test_issue_and_authenticate(self, authenticator: Authenticator):
        # Arrange
        token = authenticator.issue_token(42)

        # Act
        user_id = authenticator.authenticate(bearer(token))

        # Assert
        assert user_id == 42

    def test_token_claims(self, authenticator: Authenticator, settings: Settings):
        # Act
        claims = jwt.decode(
            authenticator.issue_token(7), settings.jwt_secret, algorithms=["HS256"]
        )

        # Assert
        assert claims["user_id"] == 7
        expected = datetime.now(UTC) + settings.jwt_lifetime
        assert abs(claims["exp"] - expected.timestamp()) < 5

    def test_header_name_is_case_insensitive(self, authenticator: Authenticator):
        token = authenticator.issue_token(3)
        assert authenticator.authenticate({"authorization": f"bearer {token}"}) == 3

    def test_missing_header(self, authenticator: Authenticator):
        with pytest.raises(MissingCredentialError):
            authenticator.authenticate({})

    @pytest.mark.parametrize(
        "header",
        ["Bearer", "Token abc", "Bearer not.a.jwt", "Bearer a b"],
    )
    def test_malformed_header(self, authenticator: Authenticator, header: str):
        with pytest.raises(MalformedCredentialError):
            authenticator.authenticate({"Authorization": header})

    def test_wrong_secret(self, authenticator: Authenticator):
        # Arrange
        token = jwt.encode(
            {"user_id": 1, "exp": datetime.now(UTC) + timedelta(hours=1)},
            "some-other-secret",
            algorithm="HS256",
        )

        # Act & Assert
        with pytest.raises(MalformedCredentialError):
            authenticator.authenticate(bearer(token))

    def test_expired_token(self, authenticator: Authenticator, settings: Settings):
        # Arrange
        token = jwt.encode(
            {"user_id": 1, "exp": datetime.now(UTC) - timedelta(minutes=1)},
            settings.jwt_secret,
            algorithm="HS256",
        )

        # Act & Assert
        with pytest.raises(ExpiredCredentialError):
            authenticator.authenticate(bearer(token))

    def test_wrong_signing_scheme(
        self, authenticator: Authenticator, settings: Settings
    ):
        # Arrange
        token = jwt.encode(
            {"user_id": 1, "exp": datetime.now(UTC) + timedelta(hours=1)},
            settings.jwt_secret,
            algorithm="HS512",
        )

        # Act & Assert
        with pytest.raises(WrongSigningSchemeError):
            authenticator.authenticate(bearer(token))

    @pytest.mark.parametrize("user_id", [0, -1, "1", None, True])
    def test_token_without_valid_user(
        self, authenticator: Authenticator, settings: Settings, user_id
    ):
        # Arrange
        token = jwt.encode(
            {"user_id": user_id, "exp": datetime.now(UTC) + timedelta(hours=1)},
            settings.jwt_secret,
            algorithm="HS256",
        )

        # Act & Assert
        with pytest.raises(MalformedCredentialError):
            authenticator.authenticate(bearer(token))

    def test_failures_are_unauthorized(self):
        for error in (
            MissingCredentialError,
            MalformedCredentialError,
            ExpiredCredentialError,
            WrongSigningSchemeError,
        ):
            assert issubclass(error, UnauthorizedError)
            assert error("x").status_code == 401

    def test_optional_identity_anonymous(self, authenticator: Authenticator):
        assert authenticator.optional_identity({}) is None

    def test_optional_identity_rejects_invalid_token(
        self, authenticator: Authenticator
    ):
        with pytest.raises(MalformedCredentialError):
            authenticator.optional_identity(bearer("garbage"))

    def test_optional_identity_with_token(self, authenticator: Authenticator):
        token = authenticator.issue_token(9)
        assert authenticator.optional_identity(bearer(token)) == 9
