from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import streamlit as st


class ConfigError(RuntimeError):
    pass


# ---------------------- DATA CLASSES ----------------------

@dataclass
class SupabaseConfig:
    url: str
    service_key: str


@dataclass
class AppConfig:
    supabase: SupabaseConfig
    page_size: int = 10


# ---------------------- LOADING ----------------------

def _streamlit_secrets() -> Mapping[str, Any]:
    try:
        # Touching st.secrets without a secrets.toml raises
        return dict(st.secrets)
    except FileNotFoundError:
        return {}


def load_config(
    secrets: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    secrets = _streamlit_secrets() if secrets is None else secrets
    environ = os.environ if environ is None else environ

    # --- Supabase ---
    # [supabase] section in secrets.toml first, then plain environment variables
    section = secrets.get("supabase") or {}
    url = section.get("url") or environ.get("SUPABASE_URL", "")
    key = section.get("service_key") or environ.get("SUPABASE_KEY", "")
    if not url or not key:
        raise ConfigError(
            "Supabase is not configured. Set [supabase] url/service_key in "
            ".streamlit/secrets.toml or SUPABASE_URL/SUPABASE_KEY in the environment."
        )

    # --- Console ---
    admin = secrets.get("admin") or {}
    raw_page_size = admin.get("page_size") or environ.get("ADMIN_PAGE_SIZE") or 10
    try:
        page_size = int(raw_page_size)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid page size: {raw_page_size!r}")
    if page_size < 1:
        raise ConfigError(f"Page size must be positive, got {page_size}")

    return AppConfig(
        supabase=SupabaseConfig(url=url, service_key=key),
        page_size=page_size,
    )
