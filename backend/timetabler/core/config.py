from functools import lru_cache
import json
from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

DEFAULT_ROOM_CATALOG = [
    "Room-101",
    "Room-102",
    "Room-103",
    "Lab-A",
    "Lab-B",
    "Hall-1",
    "Hall-2",
    "Auditorium",
]


def _split_list(value: str) -> list[str]:
    stripped = value.strip()
    if stripped.startswith("["):
        try:
            parsed = json.loads(stripped)
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]
        except json.JSONDecodeError:
            pass
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(
        env_file=str(BACKEND_ENV_FILE),
        env_file_encoding="utf-8",
        env_prefix="TIMETABLER_",
    )

    project_name: str = "Timetabler API"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    max_request_size_bytes: int = 1_000_000

    room_catalog: Annotated[list[str], NoDecode] = list(DEFAULT_ROOM_CATALOG)
    random_seed: int | None = None

    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    @field_validator("cors_origins", "room_catalog", mode="before")
    @classmethod
    def split_list_values(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return _split_list(value)
        return value

    @field_validator("room_catalog")
    @classmethod
    def require_rooms(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("room_catalog must list at least one room")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
