"""
Constants and configuration for the OpenAI Responses gateway.
Centralizes all magic numbers and configuration values.
Includes Pydantic validation for environment variables.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ============================================================================
# Model Defaults
# ============================================================================

#: Fallback model for text responses when neither caller nor settings name one.
DEFAULT_TEXT_MODEL = "gpt-4o"

#: Fallback model for responses that carry the image_generation tool.
DEFAULT_IMAGE_RESPONSE_MODEL = "gpt-5"

#: Number of partial frames requested for streamed image generation
#: when the caller does not specify partial_images.
DEFAULT_STREAM_PARTIAL_IMAGES = 3

#: Default model for the Images API (generations) when the caller omits one.
DEFAULT_IMAGES_MODEL = "dall-e-2"

#: Default size for the Images API when the caller omits one.
DEFAULT_IMAGE_SIZE = "1024x1024"

#: Default video model and clip length used for cost estimation.
DEFAULT_VIDEO_MODEL = "sora-2"
DEFAULT_VIDEO_SECONDS = "4"

#: Default speech output format and speed (reported in log metadata only).
DEFAULT_SPEECH_FORMAT = "mp3"
DEFAULT_SPEECH_SPEED = 1.0

# ============================================================================
# API Names and Endpoints (used as log record tags)
# ============================================================================

API_RESPONSES = "responses"
API_IMAGES = "images"
API_VIDEOS = "videos"
API_AUDIO = "audio"
API_FILES = "files"
API_VECTOR_STORES = "vector_stores"

ENDPOINT_RESPONSES = "/v1/responses"
ENDPOINT_RESPONSES_STREAM = "/v1/responses (stream)"
ENDPOINT_IMAGE_RESPONSES = "/v1/responses (gpt-image-1)"
ENDPOINT_IMAGE_RESPONSES_STREAM = "/v1/responses (gpt-image-1 stream)"
ENDPOINT_RESPONSE_RETRIEVE = "/v1/responses/{response_id} (GET)"
ENDPOINT_RESPONSE_DELETE = "/v1/responses/{response_id} (DELETE)"
ENDPOINT_RESPONSE_CANCEL = "/v1/responses/{response_id}/cancel (POST)"
ENDPOINT_RESPONSE_RESUME = "/v1/responses/{response_id}/stream (GET)"

ENDPOINT_SPEECH = "/v1/audio/speech"
ENDPOINT_TRANSCRIPTIONS = "/v1/audio/transcriptions"
ENDPOINT_TRANSLATIONS = "/v1/audio/translations"

ENDPOINT_IMAGE_GENERATIONS = "/v1/images/generations"
ENDPOINT_IMAGE_EDITS = "/v1/images/edits"
ENDPOINT_IMAGE_VARIATIONS = "/v1/images/variations"

ENDPOINT_VIDEOS = "/v1/videos"
ENDPOINT_VIDEO = "/v1/videos/{video_id}"
ENDPOINT_VIDEO_POLL = "/v1/videos/{video_id}/poll"
ENDPOINT_VIDEO_CONTENT = "/v1/videos/{video_id}/content"
ENDPOINT_VIDEO_REMIX = "/v1/videos/{video_id}/remix"

ENDPOINT_FILES = "/v1/files"
ENDPOINT_FILE = "/v1/files/{file_id}"
ENDPOINT_FILE_CONTENT = "/v1/files/{file_id}/content"
ENDPOINT_FILE_POLL = "/v1/files/{file_id}/poll"

ENDPOINT_VECTOR_STORES = "/v1/vector_stores"
ENDPOINT_VECTOR_STORE = "/v1/vector_stores/{vector_store_id}"
ENDPOINT_VECTOR_STORE_SEARCH = "/v1/vector_stores/{vector_store_id}/search"
ENDPOINT_VECTOR_STORE_POLL = "/v1/vector_stores/{vector_store_id}/poll"
ENDPOINT_VECTOR_STORE_FILES = "/v1/vector_stores/{vector_store_id}/files"
ENDPOINT_VECTOR_STORE_FILE = "/v1/vector_stores/{vector_store_id}/files/{file_id}"
ENDPOINT_VECTOR_STORE_FILE_CONTENT = "/v1/vector_stores/{vector_store_id}/files/{file_id}/content"
ENDPOINT_VECTOR_STORE_FILE_POLL = "/v1/vector_stores/{vector_store_id}/files/{file_id}/poll"
ENDPOINT_FILE_BATCHES = "/v1/vector_stores/{vector_store_id}/file_batches"
ENDPOINT_FILE_BATCH = "/v1/vector_stores/{vector_store_id}/file_batches/{batch_id}"
ENDPOINT_FILE_BATCH_CANCEL = "/v1/vector_stores/{vector_store_id}/file_batches/{batch_id}/cancel"
ENDPOINT_FILE_BATCH_FILES = "/v1/vector_stores/{vector_store_id}/file_batches/{batch_id}/files"
ENDPOINT_FILE_BATCH_POLL = "/v1/vector_stores/{vector_store_id}/file_batches/{batch_id}/poll"

# ============================================================================
# Stream Log Record Types
# ============================================================================

STREAM_START = "stream_start"
STREAM_RESUME = "stream_resume"
STREAM_COMPLETE = "stream_complete"
STREAM_ERROR = "stream_error"

# ============================================================================
# Status Polling
# ============================================================================

#: First wait between status checks, in milliseconds.
POLL_INITIAL_WAIT_MS = 5_000

#: Amount added to the wait after every unfinished check.
POLL_WAIT_STEP_MS = 5_000

#: Upper bound for the wait between checks.
POLL_MAX_INTERVAL_MS = 20_000

#: Overall deadline for VideosService.poll_until_complete (10 minutes).
VIDEO_POLL_MAX_WAIT_MS = 600_000

#: Video statuses that end polling.
VIDEO_TERMINAL_STATUSES = frozenset({"completed", "failed"})

#: Deadline for FilesService.wait_for_processing (30 minutes).
FILE_PROCESSING_MAX_WAIT_MS = 1_800_000

#: Uploaded file statuses that end processing waits.
FILE_TERMINAL_STATUSES = frozenset({"processed", "error"})

#: Deadline for vector store, file and batch polling (10 minutes).
VECTOR_STORE_POLL_MAX_WAIT_MS = 600_000

#: Vector store statuses that end polling.
VECTOR_STORE_TERMINAL_STATUSES = frozenset({"completed", "expired"})

#: Vector store file statuses that end polling.
VECTOR_STORE_FILE_TERMINAL_STATUSES = frozenset({"completed", "failed", "cancelled"})

#: File batch statuses that end polling.
FILE_BATCH_TERMINAL_STATUSES = frozenset({"completed", "cancelled"})

# ============================================================================
# Pricing Metadata
# ============================================================================

#: Public pricing page attached to every cost estimate.
PRICING_URL = "https://openai.com/api/pricing/"

#: Date the pricing tables were last checked against the pricing page.
PRICING_LAST_VERIFIED = "January 2025"

#: Decimal places kept on CostEstimate.cost_usd.
COST_PRECISION = 6

# ============================================================================
# Logging Configuration
# ============================================================================

#: Maximum size in bytes for log files before rotation (10MB).
#: When a log file reaches this size, it's rotated to .log.1, .log.2, etc.
LOG_MAX_SIZE = 10 * 1024 * 1024

#: Number of interaction log backups to retain per api file.
LOG_BACKUP_COUNT_INTERACTIONS = 5

#: Number of error log backups to retain during rotation.
LOG_BACKUP_COUNT_ERRORS = 3

#: Maximum characters of a plain-text audio response copied into the log.
LOG_TEXT_PREVIEW_LENGTH = 200

#: Maximum characters of a text delta echoed to the console.
LOG_DELTA_PREVIEW_LENGTH = 100

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# ============================================================================
# Environment Configuration with Pydantic Validation
# ============================================================================


class Settings(BaseSettings):
    """Environment settings with validation.

    Loads from environment variables and .env file.
    Validates at startup to fail fast on configuration errors.
    """

    # OpenAI connection
    openai_api_key: str = Field(description="OpenAI API key for authentication")
    openai_api_base_url: str = Field(default="https://api.openai.com/v1", description="OpenAI API base URL")
    openai_default_model: str = Field(default=DEFAULT_TEXT_MODEL, description="Default model for text responses")
    openai_image_response_model: str = Field(
        default=DEFAULT_IMAGE_RESPONSE_MODEL,
        description="Default model for responses using the image_generation tool",
    )
    openai_timeout: int = Field(default=60000, description="Request timeout in milliseconds")
    openai_max_retries: int = Field(default=3, description="Maximum SDK retries per request")

    # Logging
    log_level: str = Field(default="INFO", description="Console log level")
    log_dir: str = Field(default="./logs", description="Directory for interaction logs")

    # Optional debug setting
    debug: bool = Field(default=False, description="Enable debug logging")

    # HTTP request/response logging (for debugging provider issues)
    http_request_logging: bool = Field(default=False, description="Enable HTTP request/response logging")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow both OPENAI_API_KEY and openai_api_key
        extra="ignore",  # Ignore extra environment variables
    )

    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_api_key(cls, v: str) -> str:
        """Basic validation of OpenAI API key format."""
        if not v or len(v) < 10:
            raise ValueError("Invalid OpenAI API key format")
        return v

    @field_validator("openai_api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URL so endpoint joins stay predictable."""
        return v.rstrip("/")

    @field_validator("openai_timeout", "openai_max_retries")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        """Reject negative timeout and retry values."""
        if v < 0:
            raise ValueError("value must be zero or positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        value = v.upper()
        if value not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(VALID_LOG_LEVELS)}")
        return value

    def model_post_init(self, __context: Any) -> None:
        """Debug mode always lowers the console level."""
        if self.debug:
            self.log_level = "DEBUG"

    @property
    def timeout_seconds(self) -> float:
        """Request timeout converted for httpx/openai (seconds)."""
        return self.openai_timeout / 1000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses LRU cache to ensure we only load and validate settings once.
    This function will raise validation errors at startup if config is invalid.
    Pydantic will load from environment variables automatically.
    """
    return Settings()  # type: ignore[call-arg]
