"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from .params import ModeForm

DEFAULT_SERVICE_URL = "http://localhost:8080"


class ServiceConfig(BaseModel):
    """A validated configuration model for the application."""

    # Service connection
    service_url: str = DEFAULT_SERVICE_URL
    timeout: float = 300.0
    connect_timeout: float = 15.0

    # Output
    output_dir: str = "."
    json_logs: bool = False

    # Default form values for each mode
    splice_duration: float = 1.0
    splice_count: int = 4
    reverse: bool = False
    target_level: float = 0.9
    apply_to_segments: bool = False

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("service_url")
    @classmethod
    def validate_service_url(cls, v: str) -> str:
        """Ensures the service URL is an absolute HTTP(S) URL without a trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Service URL must start with http:// or https://, but got: {v}"
            )
        return v.rstrip("/")

    @field_validator("timeout", "connect_timeout")
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be greater than zero seconds.")
        return v

    @model_validator(mode="after")
    def validate_timeout_order(self) -> "ServiceConfig":
        """Checks that the connect timeout fits inside the total timeout."""
        if self.connect_timeout > self.timeout:
            raise ValueError("connect_timeout cannot exceed the total timeout.")
        return self

    def to_form(self) -> ModeForm:
        """Seeds the editable mode form with the configured defaults."""
        return ModeForm(
            splice_duration=self.splice_duration,
            splice_count=self.splice_count,
            reverse=self.reverse,
            target_level=self.target_level,
            apply_to_segments=self.apply_to_segments,
        )

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
