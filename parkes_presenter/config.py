"""Package configuration using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from parkes_presenter.projections.constants import DEFAULT_PRESENTATION_KEY
from parkes_presenter.projections.policy import MissingMode


class Settings(BaseSettings):
    """Defaults applied by ``extend_models``.

    Loaded from ``PRESENTER_``-prefixed environment variables or a ``.env``
    file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="PRESENTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Attribute of related records substituted for foreign keys
    presentation_key: str = DEFAULT_PRESENTATION_KEY

    # Policy for associations that were not loaded with the record
    missing_associations: MissingMode = MissingMode.LOAD


settings = Settings()
