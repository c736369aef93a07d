from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class HostSettings(BaseSettings):
    """Process-level settings read from ``SHIPMVP_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="SHIPMVP_", env_file=None, extra="ignore")

    environment: str = Field(default="Development", description="Hosting environment name.")
    application_name: str = Field(default="shipmvp", description="Name of the application.")
    log_level: str = Field(default="INFO", description="Root log level.")
    log_json: bool = Field(default=False, description="Emit one JSON object per log line.")


@lru_cache(maxsize=1)
def get_settings() -> HostSettings:
    return HostSettings()


class HostEnvironment(BaseModel):
    """Describes the environment the application is hosted in.

    Passed unchanged to every module's ``configure``.

    Attributes:
        name: Environment name, e.g. ``Development`` or ``Production``.
        application_name: Name of the application.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="Development", min_length=1)
    application_name: str = Field(default="shipmvp")

    @classmethod
    def from_settings(cls, settings: HostSettings) -> "HostEnvironment":
        return cls(name=settings.environment, application_name=settings.application_name)

    def is_environment(self, name: str) -> bool:
        """Case-insensitive comparison against the environment name."""
        return self.name.casefold() == name.casefold()

    def is_development(self) -> bool:
        return self.is_environment("Development")

    def is_production(self) -> bool:
        return self.is_environment("Production")
