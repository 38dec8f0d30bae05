from datetime import timedelta, timezone

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SECONDS_PER_UNIT: dict[str, int] = {
    "seconds": 1,
    "minutes": 60,
    "hours": 3600,
    "days": 86400,
    "weeks": 604800,
    "months": 2592000,
    "years": 31536000,
}


def value_to_seconds(value: int, unit: str) -> int:
    """Convert a duration expressed in ``unit`` to seconds.

    Args:
        value: Number of units
        unit: One of seconds, minutes, hours, days, weeks, months, years

    Returns:
        The duration in seconds

    Raises:
        ValueError: If the unit is unknown
    """
    try:
        return value * SECONDS_PER_UNIT[unit]
    except KeyError:
        raise ValueError(f"Invalid time unit: {unit}")


class Settings(BaseSettings):
    """Process-wide configuration.

    Built once when the application starts and passed to every component
    that needs it. Instances are frozen.

    Attributes:
        neo4j_uri: URI of the Neo4j server
        neo4j_user: Neo4j user name
        neo4j_password: Neo4j password
        neo4j_database: Name of the Neo4j database to use
        neo4j_max_connection_pool_size: Size of the driver connection pool
        jwt_secret: HS256 signing secret for access tokens
        jwt_expiration_value: Token lifetime, in ``jwt_expiration_unit``
        jwt_expiration_unit: Unit of ``jwt_expiration_value``
        tz_east_offset_in_hours: Fixed UTC offset used when rendering timestamps
        log_level: Root log level
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    neo4j_uri: str = Field(default="bolt://localhost:7687")
    neo4j_user: str = Field(default="neo4j")
    neo4j_password: str = Field(default="password")
    neo4j_database: str = Field(default="neo4j")
    neo4j_max_connection_pool_size: int = Field(default=10, ge=1)

    jwt_secret: str = Field(min_length=1)
    jwt_expiration_value: int = Field(default=7, gt=0)
    jwt_expiration_unit: str = Field(default="days")

    tz_east_offset_in_hours: int = Field(default=0, ge=-12, le=14)

    log_level: str = Field(default="INFO")

    @field_validator("jwt_expiration_unit")
    def validate_expiration_unit(cls, v: str) -> str:
        if v not in SECONDS_PER_UNIT:
            raise ValueError(
                f"jwt_expiration_unit must be one of {', '.join(SECONDS_PER_UNIT)}"
            )
        return v

    @field_validator("log_level")
    def validate_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def jwt_lifetime(self) -> timedelta:
        return timedelta(
            seconds=value_to_seconds(
                self.jwt_expiration_value, self.jwt_expiration_unit
            )
        )

    @property
    def timezone(self) -> timezone:
        return timezone(timedelta(hours=self.tz_east_offset_in_hours))
