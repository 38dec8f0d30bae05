import pytest

from kinship.errors import InternalError
from kinship.services.credentials import CredentialError, CredentialStore


@pytest.mark.unit
class TestCredentialStore:
    def test_hash_and_verify(self, credentials: CredentialStore):
        # Arrange
        password_hash = credentials.hash("correct horse")

        # Act & Assert
        assert password_hash != "correct horse"
        assert password_hash.startswith("$argon2id$")
        assert credentials.verify("correct horse", password_hash) is True
        assert credentials.verify("wrong horse", password_hash) is False

    def test_hashes_are_salted(self, credentials: CredentialStore):
        assert credentials.hash("same") != credentials.hash("same")

    def test_malformed_hash(self, credentials: CredentialStore):
        with pytest.raises(CredentialError):
            credentials.verify("password", "not-an-argon2-hash")

    def test_credential_error_is_internal(self):
        assert issubclass(CredentialError, InternalError)
        assert CredentialError("x").status_code == 500
