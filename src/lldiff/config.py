"""Configuration management for link-like-diff.

Loads tool paths, endpoints and notification targets from environment
variables (and an optional .env file) using Pydantic.

Usage:
    from lldiff.config import settings

    print(settings.hailstorm_path)
    print(settings.missing_notify_fields())
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_DEFAULT_WEB_UA = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
_DEFAULT_APPLE_URL = (
    "https://apps.apple.com/jp/app/link-like-%E3%83%A9%E3%83%96%E3%83%A9%E3%82%A4"
    "%E3%83%96-%E8%93%AE%E3%83%8E%E7%A9%BA%E3%82%B9%E3%82%AF%E3%83%BC%E3%83%AB"
    "%E3%82%A2%E3%82%A4%E3%83%89%E3%83%AB%E3%82%AF%E3%83%A9%E3%83%96/id1665027261"
)
_DEFAULT_GOOGLE_PLAY_URL = (
    "https://play.google.com/store/apps/details?id=com.oddno.lovelive&hl=en"
)


class Settings(BaseSettings):
    """link-like-diff configuration from environment variables.

    Everything has a default except the notification targets, which are
    only checked when the notify stage runs.

    Attributes:
        repo_root: Tracked repository root (data files live here)
        hailstorm_path: Data tool binary (name on PATH or absolute path)
        silicon_path: Diff renderer binary
        output_dir: Rendered image directory (relative paths resolve
            against repo_root)
        scratch_dir: Data tool output directory under repo_root
        data_extension: Extension of tracked data files
        excluded_dirs: Comma-separated directories never staged or diffed
        onebot_url: OneBot v11 HTTP API base URL
        onebot_token: Optional bearer token for the OneBot API
        notify_user_id: Account that receives the private messages
        notify_group_id: Group that receives the forward bundle
        dufs_url: Optional upload server base URL
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Tracked tree
    repo_root: Path = Field(default=Path("."), description="Tracked repository root")
    output_dir: Path = Field(default=Path("output"), description="Rendered image directory")
    scratch_dir: str = Field(default="masterdata", description="Data tool output directory")
    data_extension: str = Field(default=".yaml", description="Tracked data file extension")
    excluded_dirs: str = Field(
        default="cache,masterdata,output,scripts",
        description="Directories excluded from staging and diffing",
    )

    # External tools
    hailstorm_path: str = Field(default="hailstorm", description="Data tool binary")
    silicon_path: str = Field(default="silicon", description="Diff renderer binary")
    render_font: str = Field(default="Noto Sans CJK JP", description="Renderer font")

    # Version discovery
    web_ua: str = Field(default=_DEFAULT_WEB_UA, description="Browser-like User-Agent")
    apple_url: str = Field(default=_DEFAULT_APPLE_URL, description="App Store page")
    google_play_url: str = Field(default=_DEFAULT_GOOGLE_PLAY_URL, description="Google Play page")
    api_endpoint: str = Field(
        default="https://api.link-like-lovelive.app/v1/user/login",
        description="Login API used to read the resource version",
    )
    placeholder_res_version: str = Field(
        default="R2503000",
        description="Placeholder resource version sent with the login request",
    )

    # Messaging backend (REQUIRED for notify)
    onebot_url: str | None = Field(default=None, description="OneBot v11 HTTP API base URL")
    onebot_token: str | None = Field(default=None, description="OneBot bearer token")
    notify_user_id: int | None = Field(default=None, description="Private message recipient")
    notify_group_id: int | None = Field(default=None, description="Forward message group")

    # Image upload (optional — local file references otherwise)
    dufs_url: str | None = Field(default=None, description="Upload server base URL")
    dufs_user: str | None = Field(default=None, description="Upload digest-auth user")
    dufs_pass: str | None = Field(default=None, description="Upload digest-auth password")
    dufs_path: str = Field(default="images", description="Upload path prefix")

    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator(
        "onebot_url", "onebot_token", "notify_user_id", "notify_group_id",
        "dufs_url", "dufs_user", "dufs_pass",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v):
        """Treat empty strings from .env files as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("data_extension")
    @classmethod
    def validate_data_extension(cls, v: str) -> str:
        """Ensure the extension carries its leading dot."""
        v = v.strip()
        if not v:
            raise ValueError("data_extension must not be empty")
        return v if v.startswith(".") else f".{v}"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got {v}")
        return v_upper

    @property
    def excluded_dir_names(self) -> list[str]:
        """Excluded directories as a list, blanks dropped."""
        return [d.strip().strip("/") for d in self.excluded_dirs.split(",") if d.strip()]

    @property
    def resolved_output_dir(self) -> Path:
        """Output directory anchored at repo_root when relative."""
        if self.output_dir.is_absolute():
            return self.output_dir
        return self.repo_root / self.output_dir

    def missing_notify_fields(self) -> list[str]:
        """Names of unset settings the notify stage cannot run without."""
        required = {
            "ONEBOT_URL": self.onebot_url,
            "NOTIFY_USER_ID": self.notify_user_id,
            "NOTIFY_GROUP_ID": self.notify_group_id,
        }
        return [name for name, value in required.items() if value is None]


# Global settings instance — loaded once at import
settings = Settings()
