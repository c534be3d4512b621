# db/mutations.py

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from supabase import AsyncClient

from db.database import describe_error
from db.models import HOSTEL_GENDERS, HOSTELS_TABLE, SCHOOLS_TABLE, VISITORS_TABLE

logger = logging.getLogger(__name__)


def _ok() -> Dict[str, Any]:
    return {"success": True, "error": None}


def _failed(message: str) -> Dict[str, Any]:
    return {"success": False, "error": message}


# --- VERIFICATION -----------------------------------------------------------

async def update_verification_status(client: AsyncClient, user_id: str, status: str) -> None:
    """
    Approve ('verified') or reject ('unverified') a pending verification.

    Rejection also clears verification_id. Nothing is returned; callers
    re-fetch to see the new state.
    """
    if status not in ("verified", "unverified"):
        raise ValueError(f"Unsupported verification status: {status!r}")

    update_data: Dict[str, Any] = {"verification_status": status}
    if status == "unverified":
        update_data["verification_id"] = None

    await client.table(VISITORS_TABLE).update(update_data).eq("id", user_id).execute()
    logger.info("Verification for %s set to %s", user_id, status)


# --- HOSTEL MERCHANTS -------------------------------------------------------

def validate_hostel_merchant(
    is_hostel_merchant: bool,
    hostel_id: Optional[str],
    room_number: Optional[str],
) -> Optional[str]:
    if not is_hostel_merchant:
        return None
    if not hostel_id:
        return "Please select a hostel for this hostel merchant."
    if not room_number or not room_number.strip():
        return "Please enter a room number for this hostel merchant."
    return None


async def update_hostel_merchant_status(
    client: AsyncClient,
    merchant_id: str,
    is_hostel_merchant: bool,
    hostel_id: Optional[str] = None,
    room_number: Optional[str] = None,
) -> Dict[str, Any]:
    error = validate_hostel_merchant(is_hostel_merchant, hostel_id, room_number)
    if error:
        return _failed(error)

    if is_hostel_merchant:
        payload = {
            "is_hostel_merchant": True,
            "hostel_id": hostel_id,
            "room_number": room_number.strip(),
        }
    else:
        payload = {"is_hostel_merchant": False, "hostel_id": None, "room_number": None}

    try:
        await client.table(VISITORS_TABLE).update(payload).eq("id", merchant_id).execute()
    except Exception as e:
        logger.exception("Hostel merchant update failed for %s", merchant_id)
        return _failed(describe_error(e))

    logger.info("Hostel merchant status for %s set to %s", merchant_id, is_hostel_merchant)
    return _ok()


# --- SCHOOLS ----------------------------------------------------------------

def _school_payload(name: str, short_name: str) -> Dict[str, str]:
    name = (name or "").strip()
    short_name = (short_name or "").strip()
    if not name or not short_name:
        raise ValueError("School name and short name are required.")
    return {"name": name, "short_name": short_name}


async def create_school(client: AsyncClient, name: str, short_name: str) -> None:
    payload = _school_payload(name, short_name)
    await client.table(SCHOOLS_TABLE).insert(payload).execute()
    logger.info("Created school %s", payload["short_name"])


async def update_school(client: AsyncClient, school_id: str, name: str, short_name: str) -> None:
    payload = _school_payload(name, short_name)
    await client.table(SCHOOLS_TABLE).update(payload).eq("id", school_id).execute()
    logger.info("Updated school %s", school_id)


async def delete_school(client: AsyncClient, school_id: str) -> None:
    await client.table(SCHOOLS_TABLE).delete().eq("id", school_id).execute()
    logger.info("Deleted school %s", school_id)


# --- HOSTELS ----------------------------------------------------------------

def _hostel_payload(name: str, school_id: str, gender: str) -> Dict[str, str]:
    name = (name or "").strip()
    if not name or not school_id:
        raise ValueError("Hostel name and school are required.")
    if gender not in HOSTEL_GENDERS:
        raise ValueError(f"Unknown hostel gender: {gender!r}")
    return {"name": name, "school_id": school_id, "gender": gender}


async def create_hostel(
    client: AsyncClient, name: str, school_id: str, gender: str = "Not Selected"
) -> None:
    payload = _hostel_payload(name, school_id, gender)
    await client.table(HOSTELS_TABLE).insert(payload).execute()
    logger.info("Created hostel %s", payload["name"])


async def update_hostel(
    client: AsyncClient, hostel_id: str, name: str, school_id: str, gender: str = "Not Selected"
) -> None:
    payload = _hostel_payload(name, school_id, gender)
    await client.table(HOSTELS_TABLE).update(payload).eq("id", hostel_id).execute()
    logger.info("Updated hostel %s", hostel_id)


async def delete_hostel(client: AsyncClient, hostel_id: str) -> None:
    await client.table(HOSTELS_TABLE).delete().eq("id", hostel_id).execute()
    logger.info("Deleted hostel %s", hostel_id)
