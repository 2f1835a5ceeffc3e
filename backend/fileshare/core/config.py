from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

DEFAULT_PORT = 7878
DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024
CONFLICT_POLICIES = ("reject", "overwrite")


def _load_dotenv() -> None:
    if os.getenv("FILESHARE_SKIP_DOTENV") == "1":
        return

    env_path = Path(__file__).resolve().parents[2] / ".env"
    if not env_path.exists():
        return

    from dotenv import load_dotenv

    load_dotenv(env_path, override=False)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_non_negative_int(value: str | None, default: int = 0) -> int:
    if value is None:
        return default
    raw = value.strip()
    if not raw:
        return default
    try:
        return max(0, int(raw))
    except ValueError:
        return default


def _parse_port(value: str | None, default: int = DEFAULT_PORT) -> int:
    port = _parse_non_negative_int(value, default=default)
    if port > 65535:
        return default
    return port


def _parse_extensions(value: str) -> tuple[str, ...]:
    return tuple(item.lower().lstrip(".") for item in _split_csv(value))


def _parse_conflict_policy(value: str | None) -> str:
    normalized = (value or "").strip().lower()
    if normalized in CONFLICT_POLICIES:
        return normalized
    return "reject"


@dataclass(frozen=True)
class Settings:
    env: str
    app_name: str
    host: str
    port: int
    storage_dir: Path
    max_upload_bytes: int
    allowed_extensions: tuple[str, ...]
    conflict_policy: str
    log_level: str


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_dotenv()

    env = os.getenv("FILESHARE_ENV", "development")
    host = os.getenv("FILESHARE_HOST", "127.0.0.1").strip() or "127.0.0.1"
    port = _parse_port(os.getenv("FILESHARE_PORT"))
    storage_dir = Path(os.getenv("FILESHARE_STORAGE_DIR", "uploads"))
    max_upload_bytes = (
        _parse_non_negative_int(os.getenv("FILESHARE_MAX_UPLOAD_BYTES"), default=DEFAULT_MAX_UPLOAD_BYTES)
        or DEFAULT_MAX_UPLOAD_BYTES
    )
    log_level = os.getenv("FILESHARE_LOG_LEVEL", "INFO").strip().upper() or "INFO"

    return Settings(
        env=env,
        app_name="fileshare",
        host=host,
        port=port,
        storage_dir=storage_dir,
        max_upload_bytes=max_upload_bytes,
        allowed_extensions=_parse_extensions(os.getenv("FILESHARE_ALLOWED_EXTENSIONS", "")),
        conflict_policy=_parse_conflict_policy(os.getenv("FILESHARE_CONFLICT_POLICY")),
        log_level=log_level,
    )
