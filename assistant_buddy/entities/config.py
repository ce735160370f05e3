"""Configuration models for buddy."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceConfig(BaseSettings):
    """Process-wide settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # Ignore extra environment variables
        populate_by_name=True,  # Allow both field names and validation aliases
    )

    # OpenAI configuration
    openai_api_key: str = Field(
        default="",
        description="OpenAI API key",
        validation_alias="OPENAI_API_KEY",
    )

    # Logging configuration
    logging_level: str = Field(
        default="WARNING",
        description="Minimum level of log records",
        validation_alias="LOGGING_LEVEL",
    )
    stream: str = Field(
        default="stderr",
        description="Stream log records are written to: stdout or stderr",
        validation_alias="STREAM",
    )
    log_format: str = Field(
        default="keyvalue",
        description="Log rendering: json or keyvalue",
        validation_alias="LOG_FORMAT",
    )

    # Run polling
    poll_interval: float = Field(
        default=0.5,
        gt=0,
        description="Seconds between two run status checks",
        validation_alias="BUDDY_POLL_INTERVAL",
    )
    run_timeout: float = Field(
        default=300.0,
        description="Seconds to wait for a run before cancelling it, 0 disables the limit",
        validation_alias="BUDDY_RUN_TIMEOUT",
    )

    @property
    def has_api_key(self) -> bool:
        return bool(self.openai_api_key)

    @property
    def max_run_wait(self) -> Optional[float]:
        return self.run_timeout if self.run_timeout > 0 else None


class FileBundleSpec(BaseModel):
    """One synthetic knowledge file built from many source files."""

    model_config = ConfigDict(frozen=True)

    bundle_name: str
    src_dir: str
    dst_ext: str
    src_globs: list[str] = Field(min_length=1)


class AssistantConfig(BaseModel):
    """Project configuration read from ``buddy.toml``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Unique assistant name, used for lookup")
    model: str = Field(min_length=1, description="OpenAI model identifier")
    instructions_file: Optional[str] = Field(default=None, description="Instructions file relative to the project dir")
    file_bundles: list[FileBundleSpec] = Field(default_factory=list)

    def instructions_path(self, project_dir: Path) -> Optional[Path]:
        if not self.instructions_file:
            return None
        return project_dir / self.instructions_file
