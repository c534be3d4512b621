"""
Composition root for the console.

Owns the configuration, opens a Supabase client for each unit of work and
closes it afterwards, and keeps query runners alive across Streamlit reruns
in st.session_state.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, MutableMapping, Optional, TypeVar

import streamlit as st
from supabase import AsyncClient

from admin_console.config import AppConfig, load_config
from admin_console.log import get_logger
from db import database

logger = get_logger(__name__)

T = TypeVar("T")


def get_config() -> AppConfig:
    if "app_config" not in st.session_state:
        st.session_state.app_config = load_config()
    return st.session_state.app_config


async def with_client(cfg: AppConfig, work: Callable[[AsyncClient], Awaitable[T]]) -> T:
    client = await database.create_supabase_client(cfg.supabase.url, cfg.supabase.service_key)
    try:
        return await work(client)
    finally:
        await database.close_supabase_client(client)


def run(work: Callable[[AsyncClient], Awaitable[T]]) -> T:
    """Run one async unit of work against a fresh client on its own event loop."""
    return asyncio.run(with_client(get_config(), work))


def get_runner(key: str, factory: Callable[[], Any]) -> Any:
    state_key = f"runner:{key}"
    if state_key not in st.session_state:
        st.session_state[state_key] = factory()
    return st.session_state[state_key]


def invalidate_runners(state: Optional[MutableMapping[str, Any]] = None) -> int:
    """Mark every cached runner so its next load goes back to Supabase."""
    state = st.session_state if state is None else state
    runners = [state[key] for key in list(state.keys()) if key.startswith("runner:")]
    for runner in runners:
        runner.invalidate()
    return len(runners)


def enter_page(name: str, state: Optional[MutableMapping[str, Any]] = None) -> bool:
    """
    Record the page shown on this run. Opening a different page than on
    the previous run invalidates the cached runners, so the page mounts
    with fresh data; reruns of the same page keep them.
    """
    state = st.session_state if state is None else state
    if state.get("current_page") == name:
        return False
    state["current_page"] = name
    count = invalidate_runners(state)
    logger.debug("Entered %s, invalidated %d runners", name, count)
    return True


def mutate(work: Callable[[AsyncClient], Awaitable[Any]], success: str, *refresh: str) -> bool:
    """
    Run a mutation, then refetch the named runners with the same client.

    The success message is kept in st.session_state.flash so it survives the
    st.rerun() callers issue afterwards. Returns False when the call raised;
    the error is already shown.
    """
    runners = [
        st.session_state[f"runner:{key}"]
        for key in refresh
        if f"runner:{key}" in st.session_state
    ]

    async def _work(client: AsyncClient) -> None:
        await work(client)
        for runner in runners:
            await runner.refetch(client)

    try:
        run(_work)
    except Exception as e:
        logger.exception("Mutation failed")
        st.error(f"Failed: {database.describe_error(e)}")
        return False

    st.session_state.flash = success
    return True


def show_flash() -> None:
    message = st.session_state.pop("flash", None)
    if message:
        st.success(message)
