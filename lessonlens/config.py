"""
Configuration management using Pydantic Settings.

Loads configuration from:
1. ~/.config/lessonlens/config.yaml (user config)
2. ./lessonlens.yaml (project-local config)
3. Environment variables (override)
"""

import tempfile
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MB = 1024 * 1024


class ExtractionSettings(BaseModel):
    """Text extraction configuration."""

    temp_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory where uploaded bytes are staged during extraction"
    )
    fast_thresholds: Dict[str, int] = Field(
        default_factory=lambda: {
            "pdf": 20 * MB,
            "word": 20 * MB,
            "excel": 10 * MB,
            "powerpoint": 30 * MB,
        },
        description="Per-format size (bytes) above which the fast extraction variant is used"
    )
    max_text_length: int = Field(default=5_000_000, gt=0, description="Maximum extracted text length (chars)")
    excel_fast_row_limit: int = Field(default=2000, gt=0, description="Row cap for fast spreadsheet extraction")
    powerpoint_fast_slide_limit: int = Field(default=200, gt=0, description="Slide cap for fast presentation extraction")
    raw_scan_min_run: int = Field(default=4, ge=1, description="Shortest printable run kept by the raw string scan")
    raw_scan_max_bytes: int = Field(default=50 * MB, gt=0, description="Bytes read by the raw string scan")
    isolate_primary: bool = Field(default=False, description="Run primary extraction methods in a worker process")
    subprocess_timeout: int = Field(default=90, gt=0, description="Timeout in seconds for isolated extraction")
    max_output_chars: int = Field(default=20_000_000, gt=0, description="Output ceiling for isolated extraction")
    max_workers: int = Field(default=4, ge=1, description="Concurrent documents in batch extraction")


class CompressionSettings(BaseModel):
    """Text compression heuristics."""

    enabled: bool = Field(default=True, description="Compress extracted text before returning it")
    min_paragraph_length: int = Field(default=10, ge=0, description="Shorter paragraphs are dropped")
    long_paragraph_length: int = Field(default=100, ge=0, description="Longer paragraphs are always kept")
    min_retained_paragraphs: int = Field(
        default=5, ge=0,
        description="If the relevance filter keeps fewer paragraphs, keep all of them instead"
    )
    keywords: List[str] = Field(
        default_factory=lambda: [
            "standard", "objective", "learn", "student", "assessment",
            "skill", "concept", "understand", "analyze", "evaluate",
        ],
        description="Keywords marking instructional content (case-insensitive)"
    )


class UploadSettings(BaseModel):
    """Caller-side upload ceilings."""

    max_file_size: int = Field(default=20 * MB, gt=0, description="Maximum bytes per uploaded file")
    max_files: int = Field(default=10, gt=0, description="Maximum files per upload")


class LLMSettings(BaseModel):
    """LLM analysis service configuration."""

    base_url: Optional[str] = Field(default=None, description="OpenAI-compatible API base URL (None for OpenAI)")
    api_key: Optional[str] = Field(default=None, description="API key (falls back to OPENAI_API_KEY)")
    model: str = Field(default="gpt-4o", description="Model used for curriculum analysis")
    max_retries: int = Field(default=3, ge=0, description="Retries on rate limit errors")
    initial_delay: float = Field(default=2.0, ge=0.0, description="First backoff delay in seconds")
    timeout: int = Field(default=120, description="Timeout in seconds for LLM calls")
    chat_max_tokens: int = Field(default=1000, gt=0, description="Reply length cap for follow-up chat")
    standards_body: str = Field(default="California K12 content standards", description="Standards analyzed against")


class CacheSettings(BaseModel):
    """Analysis result cache configuration."""

    max_entries: int = Field(default=256, gt=0, description="Entries kept before LRU eviction")
    ttl_seconds: float = Field(default=3600.0, gt=0, description="Seconds before an entry expires")


class LessonLensSettings(BaseSettings):
    """Main LessonLens configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LESSONLENS_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    # Subsystem settings
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    compression: CompressionSettings = Field(default_factory=CompressionSettings)
    upload: UploadSettings = Field(default_factory=UploadSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional log file path")

    def ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        self.extraction.temp_dir.mkdir(parents=True, exist_ok=True)
        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def load_from_yaml(cls, yaml_path: Path) -> "LessonLensSettings":
        """Load configuration from YAML file."""
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            config_dict = yaml.safe_load(f) or {}

        return cls(**config_dict)

    @classmethod
    def load(cls) -> "LessonLensSettings":
        """
        Load configuration with precedence:
        1. Project-local ./lessonlens.yaml
        2. User config ~/.config/lessonlens/config.yaml
        3. Environment variables
        4. Defaults
        """
        config = cls()

        user_config = Path.home() / ".config/lessonlens/config.yaml"
        if user_config.exists():
            config = cls.load_from_yaml(user_config)

        local_config = Path.cwd() / "lessonlens.yaml"
        if local_config.exists():
            with open(local_config) as f:
                local_dict = yaml.safe_load(f) or {}
            config = cls(**{**config.model_dump(), **local_dict})

        return config

    def save_to_yaml(self, yaml_path: Path) -> None:
        """Save current configuration to YAML file."""
        yaml_path.parent.mkdir(parents=True, exist_ok=True)
        with open(yaml_path, "w") as f:
            yaml.dump(
                self.model_dump(mode="json", exclude_none=True),
                f,
                default_flow_style=False,
                sort_keys=False,
            )


def get_config() -> LessonLensSettings:
    """Convenience function to get current configuration."""
    return LessonLensSettings.load()
