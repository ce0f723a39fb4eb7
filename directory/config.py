from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from directory.schemas import DEFAULT_ITEMS_PER_PAGE


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


@dataclass(frozen=True)
class Settings:
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    places_table: str = "places"
    directory_table: str = "directory"
    items_per_page: int = DEFAULT_ITEMS_PER_PAGE
    demo_data_path: Optional[str] = None
    log_level: str = "INFO"

    @property
    def supabase_enabled(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @classmethod
    def from_env(cls, *, dotenv: bool = True) -> "Settings":
        if dotenv:
            load_dotenv()
        return cls(
            supabase_url=os.getenv("SUPABASE_URL") or None,
            supabase_key=os.getenv("SUPABASE_ANON_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or None,
            places_table=os.getenv("PLACES_TABLE", "places"),
            directory_table=os.getenv("DIRECTORY_TABLE", "directory"),
            items_per_page=_int_env("ITEMS_PER_PAGE", DEFAULT_ITEMS_PER_PAGE),
            demo_data_path=os.getenv("DEMO_DATA_PATH") or None,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
