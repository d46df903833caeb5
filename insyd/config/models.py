"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .duration import DurationParseError, parse_duration, validate_duration_range


class AudienceMode(str, Enum):
    """Who receives content-creation notifications."""

    FOLLOWERS = "followers"
    BROADCAST = "broadcast"


class LikePolicy(str, Enum):
    """What a repeated like request from the same user does."""

    TOGGLE = "toggle"
    REJECT = "reject"


class DeliveryMode(str, Enum):
    """How outbound email jobs are executed."""

    BACKGROUND = "background"
    INLINE = "inline"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class NotificationConfig(BaseModel):
    """Fan-out and inbox behaviour."""

    audience_mode: AudienceMode = Field(
        AudienceMode.FOLLOWERS,
        description="followers: notify the author's followers; broadcast: notify every user",
    )
    like_policy: LikePolicy = Field(
        LikePolicy.TOGGLE, description="toggle: second like removes it; reject: second like fails"
    )
    notify_on_content_removed: bool = Field(
        False, description="Notify prior likers/applicants when a blog or job is deleted"
    )
    inbox_limit: int = Field(20, ge=1, le=100, description="Notifications returned per inbox fetch")
    site_url: str = Field("http://localhost:8000", description="Link target used in emails")

    @field_validator("site_url")
    @classmethod
    def strip_site_url(cls, v: str) -> str:
        """Strip whitespace and trailing slashes from the site URL."""
        stripped = v.strip().rstrip("/")
        if not stripped:
            raise ValueError("site_url cannot be empty")
        return stripped

    model_config = {"use_enum_values": True}


class EmailConfig(BaseModel):
    """Outbound email settings. Delivery is attempted at most once per message."""

    enabled: bool = Field(True, description="Send email alongside in-app notifications")
    use_tls: bool = Field(True, description="Use STARTTLS on non-465 ports")
    delivery_mode: DeliveryMode = Field(
        DeliveryMode.BACKGROUND, description="background: worker threads; inline: in the caller"
    )
    max_workers: int = Field(4, ge=1, le=32, description="Worker threads for background delivery")
    send_welcome_email: bool = Field(True, description="Email newly registered users")

    model_config = {"use_enum_values": True}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class ServerConfig(BaseModel):
    """HTTP server settings."""

    host: str = Field("127.0.0.1", min_length=1)
    port: int = Field(8000, ge=1, le=65535)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class MaintenanceConfig(BaseModel):
    """Background maintenance jobs."""

    keepalive_enabled: bool = Field(False, description="Periodically ping the database")
    keepalive_interval: str = Field("5m", description="Interval between database pings")

    # Computed field
    keepalive_interval_seconds: Optional[int] = None

    @field_validator("keepalive_interval")
    @classmethod
    def validate_keepalive_interval(cls, v: str) -> str:
        """Validate the keepalive interval parses and is between 1 minute and 24 hours."""
        try:
            validate_duration_range(parse_duration(v), label="Keepalive interval")
        except DurationParseError as e:
            raise ValueError(str(e)) from e
        return v

    @model_validator(mode="after")
    def compute_interval_seconds(self):
        self.keepalive_interval_seconds = parse_duration(self.keepalive_interval)
        return self


class AppConfig(BaseModel):
    """Root configuration object. Every section has defaults."""

    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    maintenance: MaintenanceConfig = Field(default_factory=MaintenanceConfig)
