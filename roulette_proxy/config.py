from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SLUG = "immersive-roulette"


class Settings(BaseSettings):
    """
    Process-wide proxy configuration, read from the environment once.

    Instances are frozen; build a new one (``load_settings()`` or
    ``Settings(...)`` in tests) instead of mutating.
    """
    model_config = SettingsConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        case_sensitive=False,
        extra="ignore",
    )

    service_name: str = Field(default="roulette-proxy", validation_alias="SERVICE_NAME")
    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=10000, validation_alias="PORT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    # Upstream: template wins over base
    upstream_template: str = Field(
        default="",
        validation_alias=AliasChoices("UPSTREAM_TEMPLATE", "UPSTREAM"),
    )
    upstream_base: str = Field(
        default="",
        validation_alias=AliasChoices("UPSTREAM_BASE", "UPSTREAM_BASE_URL"),
    )
    upstream_timeout: float = Field(default=20.0, validation_alias="UPSTREAM_TIMEOUT")
    default_slug: str = Field(default=DEFAULT_SLUG, validation_alias="DEFAULT_SLUG")

    basic_user: str = Field(default="", validation_alias="BASIC_USER")
    basic_pass: str = Field(default="", validation_alias="BASIC_PASS")

    allow_origin: str = Field(
        default="*",
        validation_alias=AliasChoices("ALLOW_ORIGIN", "ALLOWED_ORIGINS"),
    )

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.allow_origin.split(",") if o.strip()]

    @property
    def has_credentials(self) -> bool:
        return bool(self.basic_user and self.basic_pass)


def load_settings() -> Settings:
    return Settings()
