"""Admin schedule override endpoints."""

from fastapi import APIRouter, Query, status

from clinic_booking.dependencies import AdminAccess, Overrides
from clinic_booking.schemas.availability import (
    OverrideDeleteResponse,
    OverrideLookupResponse,
    OverrideMutationResponse,
    OverrideUpsert,
)
from clinic_booking.schemas.common import ConsultType

router = APIRouter(dependencies=[AdminAccess])


@router.get(
    "/override",
    response_model=OverrideLookupResponse,
    status_code=status.HTTP_200_OK,
    summary="Get schedule override",
)
async def get_override(
    overrides: Overrides,
    date: str = Query(...),
    consult_type: ConsultType = Query(ConsultType.OFFLINE, alias="consultType"),
) -> OverrideLookupResponse:
    """
    Get the override for a date.

    Returns:
        The override, or ``override: null`` when none is set
    """
    return await overrides.get_override(date, consult_type)


@router.put(
    "/override",
    response_model=OverrideMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Create or update schedule override",
)
async def upsert_override(
    data: OverrideUpsert,
    overrides: Overrides,
) -> OverrideMutationResponse:
    """
    Create or merge a schedule override.

    With ``applyMode=once`` the override applies to the given date only.
    With ``applyMode=always`` the slot list replaces the weekly offline
    template; online schedules cannot be changed this way.

    Args:
        data: Override fields
        overrides: Override administration service

    Returns:
        Saved override, or the new template for ``always``

    Raises:
        UnsupportedOperationException: For ``always`` on the online schedule
        ValidationException: If the date is malformed or slots are missing
    """
    return await overrides.upsert_override(data)


@router.delete(
    "/override",
    response_model=OverrideDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete schedule override",
)
async def delete_override(
    overrides: Overrides,
    date: str = Query(...),
    consult_type: ConsultType = Query(ConsultType.OFFLINE, alias="consultType"),
) -> OverrideDeleteResponse:
    """
    Delete the override for a date, restoring the default schedule.

    Raises:
        NotFoundException: If no override exists
    """
    return await overrides.delete_override(date, consult_type)
