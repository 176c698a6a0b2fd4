"""Configuration for the assistant core.

Centralizes magic numbers and environment-driven settings.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Pipeline pacing
MIN_RESPONSE_DELAY = 2.0  # Seconds a placeholder stays visible at minimum
SESSION_START_COMMAND = "/session_start"

# Word-scaled delay bounds (seconds / words) for fragments after the first
SCALED_DELAY_MIN = 0.5
SCALED_DELAY_MAX = 2.0
SCALED_DELAY_WORDS_MIN = 5
SCALED_DELAY_WORDS_MAX = 15

# Quota
QUOTA_WARNING_MARGIN = 5  # Messages before the limit at which the warning shows
QUOTA_BREACHED_REASON = "quota-breached"

# Input limits
MAX_MESSAGE_LENGTH = 2048  # Characters

# Feedback
POSITIVE_QUICK_RESPONSES = ("Solved my issue", "Easy to understand", "Accurate")
NEGATIVE_QUICK_RESPONSES = ("Didn't solve my issue", "Confusing", "Inaccurate")

# Thumbs prompt payloads
THUMBS_UP_PAYLOAD = "/feedback_thumbs_up"
THUMBS_DOWN_PAYLOAD = "/feedback_thumbs_down"

# Tours the host knows how to start
KNOWN_TOURS = ("getting-started", "insights", "openshift")

# Account APIs
DEFAULT_SSO_BASE_URL = "https://sso.stage.redhat.com"
DEFAULT_HTTP_TIMEOUT = 30.0

# Environments
ENV_STAGE = "stage"
ENV_PROD = "prod"


class ResponseDelay(BaseModel):
    """Bounds for the word-scaled response delay."""

    delay_min: float = Field(default=SCALED_DELAY_MIN, ge=0)
    delay_max: float = Field(default=SCALED_DELAY_MAX, ge=0)
    words_min: int = Field(default=SCALED_DELAY_WORDS_MIN, ge=0)
    words_max: int = Field(default=SCALED_DELAY_WORDS_MAX, ge=1)


class AssistantConfig(BaseModel):
    """Runtime settings for one widget instance."""

    min_response_delay: float = Field(
        default=MIN_RESPONSE_DELAY,
        ge=0,
        description="Minimum seconds between placeholder and resolved message"
    )
    scaled_delay: ResponseDelay | None = Field(
        default=None,
        description="Word-scaled delay for fragments after the first"
    )
    quota_warning_margin: int = Field(default=QUOTA_WARNING_MARGIN, ge=0)
    max_message_length: int = Field(default=MAX_MESSAGE_LENGTH, ge=1)
    environment: str = Field(default=ENV_STAGE, description="stage or prod")
    is_preview: bool = Field(default=False)
    sso_base_url: str = Field(default=DEFAULT_SSO_BASE_URL)
    talk_url: str | None = Field(default=None, description="Talk endpoint for the HTTP session")
    feedback_url: str | None = Field(default=None, description="Endpoint for issue feedback")
    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0)
    known_tours: tuple[str, ...] = Field(default=KNOWN_TOURS)


def load_config(**overrides: object) -> AssistantConfig:
    """Build an AssistantConfig from environment variables.

    Args:
        **overrides: Values that take precedence over the environment

    Returns:
        Validated configuration

    Environment variables:
        CONVOCORE_MIN_RESPONSE_DELAY: Minimum placeholder time in seconds (default: 2.0)
        CONVOCORE_SCALED_DELAY: Enable word-scaled delays when set to "1"/"true"
        CONVOCORE_QUOTA_WARNING_MARGIN: Quota warning margin (default: 5)
        CONVOCORE_MAX_MESSAGE_LENGTH: Maximum characters per message (default: 2048)
        CONVOCORE_ENVIRONMENT: stage or prod (default: stage)
        CONVOCORE_PREVIEW: Preview mode when set to "1"/"true"
        CONVOCORE_SSO_BASE_URL: Base URL of the account APIs
        CONVOCORE_TALK_URL: Talk endpoint used by the HTTP session
        CONVOCORE_FEEDBACK_URL: Feedback endpoint used by the issue sink
        CONVOCORE_HTTP_TIMEOUT: HTTP timeout in seconds (default: 30)
        CONVOCORE_KNOWN_TOURS: Comma-separated tour names
    """
    load_dotenv()

    values: dict[str, object] = {
        "min_response_delay": float(os.getenv("CONVOCORE_MIN_RESPONSE_DELAY", str(MIN_RESPONSE_DELAY))),
        "quota_warning_margin": int(os.getenv("CONVOCORE_QUOTA_WARNING_MARGIN", str(QUOTA_WARNING_MARGIN))),
        "max_message_length": int(os.getenv("CONVOCORE_MAX_MESSAGE_LENGTH", str(MAX_MESSAGE_LENGTH))),
        "environment": os.getenv("CONVOCORE_ENVIRONMENT", ENV_STAGE).lower(),
        "is_preview": _env_flag("CONVOCORE_PREVIEW"),
        "sso_base_url": os.getenv("CONVOCORE_SSO_BASE_URL", DEFAULT_SSO_BASE_URL),
        "talk_url": os.getenv("CONVOCORE_TALK_URL"),
        "feedback_url": os.getenv("CONVOCORE_FEEDBACK_URL"),
        "http_timeout": float(os.getenv("CONVOCORE_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))),
    }
    if _env_flag("CONVOCORE_SCALED_DELAY"):
        values["scaled_delay"] = ResponseDelay()

    tours = os.getenv("CONVOCORE_KNOWN_TOURS")
    if tours:
        values["known_tours"] = tuple(t.strip() for t in tours.split(",") if t.strip())

    values.update(overrides)
    return AssistantConfig(**values)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes")
