"""Runtime configuration for the review queue assigner."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from urllib.parse import urlparse

ALL_PROJECTS = "all"
DEFAULT_CONFIG_PATH = Path("~/.review-queue.json")
DEFAULT_API_URL = "https://review-api.udacity.com/api/v1"
DEFAULT_REVIEW_SITE_URL = "https://review.udacity.com"
DEFAULT_PUSHBULLET_URL = "https://api.pushbullet.com/v2"


@dataclass(slots=True)
class ApiSettings:
    """Remote review API settings."""

    base_url: str = DEFAULT_API_URL
    review_site_url: str = DEFAULT_REVIEW_SITE_URL
    pushbullet_url: str = DEFAULT_PUSHBULLET_URL
    request_timeout_seconds: float = 30.0
    transport_retries: int = 0


@dataclass(slots=True)
class LoopSettings:
    """Reconciliation loop cadence and limits."""

    tick_seconds: float = 30.0
    info_interval: int = 10
    capacity: int = 2
    refresh_window_seconds: int = 300
    exit_grace_seconds: float = 1.0


@dataclass(slots=True)
class Settings:
    """Application settings grouped by domain concerns."""

    token: str = ""
    token_expiry: datetime | None = None
    languages: tuple[str, ...] = ("en-us",)
    certified_projects: dict[str, str] = field(default_factory=dict)
    api: ApiSettings = field(default_factory=ApiSettings)
    loop: LoopSettings = field(default_factory=LoopSettings)
    log_path: Path | None = None
    log_level: str = "INFO"
    desktop_notifications: bool = True

    @classmethod
    def from_env(cls, config_path: Path | None = None) -> Settings:
        """Load settings from the JSON config file, then apply environment overrides."""

        path = config_path or Path(
            os.getenv("REVIEW_QUEUE_CONFIG_PATH", str(DEFAULT_CONFIG_PATH)),
        )
        stored = _read_config_file(path.expanduser())

        token = os.getenv("REVIEW_QUEUE_TOKEN", str(stored.get("token") or ""))
        expiry_raw = os.getenv("REVIEW_QUEUE_TOKEN_EXPIRY", str(stored.get("token_expiry") or ""))
        languages_raw = os.getenv("REVIEW_QUEUE_LANGUAGES", "")
        if languages_raw.strip():
            languages = _split_csv(languages_raw)
        else:
            languages = tuple(str(value) for value in stored.get("languages") or ("en-us",))
        log_path_raw = os.getenv("REVIEW_QUEUE_LOG_PATH", "").strip()

        return cls(
            token=token.strip(),
            token_expiry=_parse_expiry(expiry_raw),
            languages=languages,
            certified_projects=_parse_certs(stored.get("certs") or {}),
            api=ApiSettings(
                base_url=os.getenv("REVIEW_QUEUE_API_URL", DEFAULT_API_URL).rstrip("/"),
                review_site_url=os.getenv(
                    "REVIEW_QUEUE_REVIEW_SITE_URL",
                    DEFAULT_REVIEW_SITE_URL,
                ).rstrip("/"),
                pushbullet_url=os.getenv(
                    "REVIEW_QUEUE_PUSHBULLET_URL",
                    DEFAULT_PUSHBULLET_URL,
                ).rstrip("/"),
                request_timeout_seconds=float(
                    os.getenv("REVIEW_QUEUE_REQUEST_TIMEOUT_SECONDS", "30.0"),
                ),
                transport_retries=int(os.getenv("REVIEW_QUEUE_TRANSPORT_RETRIES", "0")),
            ),
            loop=LoopSettings(
                tick_seconds=float(os.getenv("REVIEW_QUEUE_TICK_SECONDS", "30.0")),
                info_interval=int(os.getenv("REVIEW_QUEUE_INFO_INTERVAL", "10")),
                capacity=int(os.getenv("REVIEW_QUEUE_CAPACITY", "2")),
                refresh_window_seconds=int(
                    os.getenv("REVIEW_QUEUE_REFRESH_WINDOW_SECONDS", "300"),
                ),
                exit_grace_seconds=float(os.getenv("REVIEW_QUEUE_EXIT_GRACE_SECONDS", "1.0")),
            ),
            log_path=Path(log_path_raw).expanduser() if log_path_raw else None,
            log_level=os.getenv("REVIEW_QUEUE_LOG_LEVEL", "INFO").strip().upper() or "INFO",
            desktop_notifications=_env_bool("REVIEW_QUEUE_DESKTOP_NOTIFICATIONS", default=True),
        )

    def validate_for_assign(self) -> None:
        """Raise configuration error if the assign loop cannot start."""

        if not self.token:
            raise ValueError(
                "An API token is required. "
                "Set REVIEW_QUEUE_TOKEN or add 'token' to the config file.",
            )
        if not self.languages:
            raise ValueError("At least one language is required. Set REVIEW_QUEUE_LANGUAGES.")
        if not self.certified_projects:
            raise ValueError(
                "No certified projects configured. Add a 'certs' mapping to the config file.",
            )
        if self.loop.tick_seconds <= 0:
            raise ValueError("REVIEW_QUEUE_TICK_SECONDS must be > 0.")
        if self.loop.info_interval <= 0:
            raise ValueError("REVIEW_QUEUE_INFO_INTERVAL must be > 0.")
        if self.loop.capacity <= 0:
            raise ValueError("REVIEW_QUEUE_CAPACITY must be > 0.")
        if self.loop.refresh_window_seconds < 0:
            raise ValueError("REVIEW_QUEUE_REFRESH_WINDOW_SECONDS must be >= 0.")
        _validate_url("REVIEW_QUEUE_API_URL", self.api.base_url)
        _validate_url("REVIEW_QUEUE_REVIEW_SITE_URL", self.api.review_site_url)

    def validate_project_ids(self, requested: tuple[str, ...] | list[str]) -> tuple[str, ...]:
        """Resolve requested ids against certified projects.

        The literal ``all`` expands to every certified project. Any other id that
        is not certified fails the whole request, listing every offending id.
        """

        certified = tuple(self.certified_projects)
        normalized = [str(value).strip() for value in requested if str(value).strip()]
        if normalized == [ALL_PROJECTS]:
            return certified
        if not normalized:
            raise ValueError("At least one project id (or 'all') is required.")
        invalid = [value for value in normalized if value not in self.certified_projects]
        if invalid:
            raise ValueError(
                f"Illegal Action: Not certified for project(s) {', '.join(invalid)}",
            )
        deduped: list[str] = []
        for value in normalized:
            if value not in deduped:
                deduped.append(value)
        return tuple(deduped)


@dataclass(slots=True, frozen=True)
class AssignConfig:
    """Validated, read-only inputs of one assign session."""

    settings: Settings
    project_ids: tuple[str, ...]
    push_access_token: str | None = None
    feedbacks_enabled: bool = False


def build_assign_config(
    settings: Settings,
    *,
    requested_ids: tuple[str, ...] | list[str],
    push_access_token: str | None,
    feedbacks_enabled: bool,
) -> AssignConfig:
    """Validate settings and requested ids into an AssignConfig."""

    settings.validate_for_assign()
    project_ids = settings.validate_project_ids(requested_ids)
    token = (push_access_token or "").strip() or None
    return AssignConfig(
        settings=settings,
        project_ids=project_ids,
        push_access_token=token,
        feedbacks_enabled=feedbacks_enabled,
    )


def _read_config_file(path: Path) -> dict[str, object]:
    if not path.exists():
        return {}
    try:
        payload = json.loads(path.read_text("utf-8"))
    except json.JSONDecodeError as error:
        raise ValueError(f"Invalid JSON in config file {path}: {error}") from error
    if not isinstance(payload, dict):
        raise ValueError(f"Config file {path} must contain a JSON object.")
    return payload


def _parse_certs(raw: object) -> dict[str, str]:
    """Accept ``{"id": "name"}`` or ``{"id": {"name": "..."}}`` mappings."""

    if not isinstance(raw, dict):
        raise ValueError("Config 'certs' must be a mapping of project id to project name.")
    certs: dict[str, str] = {}
    for project_id, value in raw.items():
        if isinstance(value, dict):
            name = value.get("name") or str(project_id)
        else:
            name = value
        certs[str(project_id)] = str(name)
    return certs


def _parse_expiry(value: str) -> datetime | None:
    normalized = value.strip()
    if not normalized:
        return None
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as error:
        raise ValueError(f"Invalid token expiry timestamp: {value!r}") from error
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def _split_csv(value: str) -> tuple[str, ...]:
    parts: list[str] = []
    for part in value.split(","):
        token = part.strip()
        if token and token not in parts:
            parts.append(token)
    return tuple(parts)


def _validate_url(name: str, value: str) -> None:
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(
            f"Invalid {name}: {value!r}. Expected an absolute URL with http:// or https:// scheme.",
        )


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
