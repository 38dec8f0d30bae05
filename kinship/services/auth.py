import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from kinship.config import Settings
from kinship.errors import UnauthorizedError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class MissingCredentialError(UnauthorizedError):
    """Exception raised when a request carries no bearer token."""

    pass


class MalformedCredentialError(UnauthorizedError):
    """Exception raised when a token cannot be parsed or verified."""

    pass


class ExpiredCredentialError(UnauthorizedError):
    """Exception raised when a token has expired."""

    pass


class WrongSigningSchemeError(UnauthorizedError):
    """Exception raised when a token is not signed with HS256."""

    pass


class Authenticator:
    """Issues and verifies HS256 access tokens.

    Tokens carry the claims ``user_id`` and ``exp``. Verification is a pure
    function of the request headers; the record store is never consulted.

    Attributes:
        secret: Signing secret
        lifetime: How long an issued token stays valid
    """

    def __init__(self, settings: Settings) -> None:
        self.secret: str = settings.jwt_secret
        self.lifetime = settings.jwt_lifetime

    def issue_token(self, user_id: int) -> str:
        """Sign a token for a user.

        Args:
            user_id: ID of the user the token identifies

        Returns:
            The encoded JWT
        """
        claims: dict[str, Any] = {
            "user_id": user_id,
            "exp": datetime.now(UTC) + self.lifetime,
        }
        logger.debug("Issuing token for user %d", user_id)
        return jwt.encode(claims, self.secret, algorithm=ALGORITHM)

    def _get_token_from_header(self, headers: Mapping[str, str]) -> str | None:
        auth_header = next(
            (value for key, value in headers.items() if key.lower() == "authorization"),
            None,
        )
        if auth_header is None:
            return None

        try:
            scheme, token = auth_header.split()
        except ValueError:
            raise MalformedCredentialError("Invalid authorization header format")
        if scheme.lower() != "bearer":
            raise MalformedCredentialError("Invalid authentication scheme")
        return token

    def validate_token(self, token: str) -> int:
        """Validate a token and extract the user it identifies.

        Args:
            token: The encoded JWT

        Returns:
            The user ID from the token claims

        Raises:
            WrongSigningSchemeError: If the token is not signed with HS256
            ExpiredCredentialError: If the token has expired
            MalformedCredentialError: If the token is otherwise invalid
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError:
            raise MalformedCredentialError("Invalid token")
        if header.get("alg") != ALGORITHM:
            raise WrongSigningSchemeError(
                f"Token must be signed with {ALGORITHM}, not {header.get('alg')}"
            )

        try:
            claims = jwt.decode(token, self.secret, algorithms=[ALGORITHM])
        except ExpiredSignatureError:
            logger.debug("Rejected expired token")
            raise ExpiredCredentialError("Token has expired")
        except JWTError as e:
            raise MalformedCredentialError(f"Invalid token: {str(e)}")

        user_id = claims.get("user_id")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or user_id <= 0:
            raise MalformedCredentialError("Token does not identify a user")
        return user_id

    def authenticate(self, headers: Mapping[str, str]) -> int:
        """Identify the caller of a request that requires authentication.

        Args:
            headers: The request headers

        Returns:
            ID of the authenticated user

        Raises:
            MissingCredentialError: If there is no Authorization header
            MalformedCredentialError: If the header or token is invalid
            ExpiredCredentialError: If the token has expired
            WrongSigningSchemeError: If the token is not signed with HS256
        """
        token = self._get_token_from_header(headers)
        if token is None:
            raise MissingCredentialError("No authorization header found")
        return self.validate_token(token)

    def optional_identity(self, headers: Mapping[str, str]) -> int | None:
        """Identify the caller if they sent a token.

        A request without an Authorization header is anonymous. A request
        with an invalid one is rejected like on an authenticated route.
        """
        token = self._get_token_from_header(headers)
        if token is None:
            return None
        return self.validate_token(token)
