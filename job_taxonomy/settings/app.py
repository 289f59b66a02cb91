"""Application settings powered by Pydantic BaseSettings."""

from pydantic import (
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from job_taxonomy.features.llm.errors import InvalidArgumentError
from job_taxonomy.features.llm.models import ModelSettings


class AppSettings(BaseSettings):
    """Centralized environment configuration.

    Run-shaping values (model, truncate length, retries, K) have no
    defaults; anything left unset must be supplied on the command line.
    """

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, env_file=".env", env_file_encoding="utf-8"
    )

    gemini_api_key: str | None = Field(default=None, validation_alias="GEMINI_API_KEY")
    llm_model: str | None = Field(default=None, validation_alias="JOB_TAXONOMY_MODEL")
    truncate_length: PositiveInt | None = Field(
        default=None, validation_alias="JOB_TAXONOMY_TRUNCATE_LENGTH"
    )
    max_retries: NonNegativeInt | None = Field(
        default=None, validation_alias="JOB_TAXONOMY_MAX_RETRIES"
    )
    top_k: PositiveInt | None = Field(
        default=None, validation_alias="JOB_TAXONOMY_TOP_K"
    )
    request_timeout: PositiveFloat = Field(
        default=60.0, validation_alias="JOB_TAXONOMY_REQUEST_TIMEOUT"
    )
    max_workers: PositiveInt = Field(
        default=1, validation_alias="JOB_TAXONOMY_MAX_WORKERS"
    )
    min_request_interval: NonNegativeFloat = Field(
        default=0.0, validation_alias="JOB_TAXONOMY_MIN_REQUEST_INTERVAL"
    )

    def to_model_settings(
        self, model: str | None = None, truncate_length: int | None = None
    ) -> ModelSettings:
        """Build model settings, preferring explicit overrides.

        Args:
            model: Model name overriding JOB_TAXONOMY_MODEL.
            truncate_length: Character budget overriding
                JOB_TAXONOMY_TRUNCATE_LENGTH.

        Raises:
            InvalidArgumentError: If a value is missing or invalid.
        """
        model_name = model or self.llm_model
        length = truncate_length or self.truncate_length
        if model_name is None or length is None:
            msg = "Model name and truncate length must both be configured"
            raise InvalidArgumentError(msg)
        return ModelSettings(
            model_name=model_name,
            truncate_length=length,
            request_timeout=self.request_timeout,
        )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
