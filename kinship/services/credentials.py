from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from kinship.errors import InternalError


class CredentialError(InternalError):
    """Exception raised when a stored password hash cannot be read."""

    pass


class CredentialStore:
    """Argon2id password hashing.

    Plaintext passwords only pass through this class; they are never
    stored or logged.

    Attributes:
        hasher: The configured argon2 PasswordHasher
    """

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self.hasher = hasher or PasswordHasher(
            time_cost=3,
            memory_cost=65536,  # KiB
            parallelism=4,
            hash_len=32,
            salt_len=16,
        )

    def hash(self, plaintext: str) -> str:
        return self.hasher.hash(plaintext)

    def verify(self, plaintext: str, password_hash: str) -> bool:
        """Check a password against a stored hash.

        Args:
            plaintext: The password supplied by the caller
            password_hash: The stored argon2 hash

        Returns:
            True if the password matches, False otherwise

        Raises:
            CredentialError: If the stored hash is malformed
        """
        try:
            return self.hasher.verify(password_hash, plaintext)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError) as e:
            raise CredentialError(f"Stored password hash is unreadable: {str(e)}") from e
