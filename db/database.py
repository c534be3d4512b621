# db/database.py

from supabase import AsyncClient, acreate_client


async def create_supabase_client(url: str, key: str) -> AsyncClient:
    """
    Returns a new async Supabase client.
    The console uses the service key because verification and hostel
    updates on unique_visitors require RLS bypass.

    The caller owns the client and must close it with close_supabase_client.
    """
    if not url or not key:
        raise RuntimeError("Supabase integration not configured.")
    return await acreate_client(url, key)


async def close_supabase_client(client: AsyncClient) -> None:
    """Close the PostgREST and auth HTTP sessions; the console uses no others."""
    try:
        await client.postgrest.aclose()
    finally:
        await client.auth.close()


def describe_error(exc: BaseException) -> str:
    """Human readable message for a failed Supabase call."""
    message = getattr(exc, "message", None) or str(exc) or "An error occurred"
    parts = [str(message).strip()]
    details = getattr(exc, "details", None)
    if details:
        parts.append(f"Details: {details}")
    hint = getattr(exc, "hint", None)
    if hint:
        parts.append(f"Hint: {hint}")
    return " ".join(part for part in parts if part)
