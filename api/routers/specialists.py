"""
Specialists router - specialist management endpoints.

Same access rules as the patients router: list and create are admin only,
profile returns the caller's own record, and the ``/{record_id}`` routes are
open to the specialist themselves or an admin.

Architecture:
    HTTP Request → Router (this file) → ResourceService → ResourceRepository → MongoDB
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from core.auth import Caller, get_current_caller, require_admin, require_self_or_admin
from core.config import DEFAULT_PER_PAGE, MAX_PER_PAGE
from core.dependencies import get_specialist_service
from models.specialist import Specialist
from schemas import SpecialistCreate, SpecialistReplace, SpecialistResponse, SpecialistUpdate
from services import ResourceService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/v1/specialists",
    tags=["Specialists"],
)


def load_specialist(
    record_id: str,
    specialist_service: ResourceService = Depends(get_specialist_service),
) -> Specialist:
    """Resolve the ``record_id`` path parameter to a stored specialist (404 otherwise)."""
    return specialist_service.load(record_id)


@router.get(
    "",
    response_model=List[SpecialistResponse],
    response_model_exclude_none=True,
    dependencies=[Depends(require_admin)],
    summary="List specialists",
    description=f"List specialists newest first. Filters are exact matches. "
                f"Default page size is {DEFAULT_PER_PAGE}, maximum is {MAX_PER_PAGE}."
)
def list_specialists(
    page: int = Query(1, ge=1),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE, alias="perPage"),
    user_id: Optional[str] = Query(None, alias="userId"),
    email: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    crp: Optional[str] = Query(None),
    approach: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    specialist_service: ResourceService = Depends(get_specialist_service),
):
    filters = {
        "userId": user_id,
        "email": email,
        "name": name,
        "crp": crp,
        "approach": approach,
        "phone": phone,
    }
    return specialist_service.list_records(filters, page=page, per_page=per_page)


@router.post(
    "",
    response_model=SpecialistResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    summary="Create a new specialist",
    description="Add a new specialist. E-mail and CRP must be unique; a duplicate returns 409 naming the field."
)
def create_specialist(
    specialist: SpecialistCreate,
    specialist_service: ResourceService = Depends(get_specialist_service),
):
    return specialist_service.create_record(specialist.model_dump(by_alias=True, exclude_none=True))


@router.get(
    "/profile",
    response_model=SpecialistResponse,
    response_model_exclude_none=True,
    summary="Logged-in specialist profile",
)
def specialist_profile(
    caller: Caller = Depends(get_current_caller),
    specialist_service: ResourceService = Depends(get_specialist_service),
):
    return specialist_service.get_profile(caller.id)


@router.get(
    "/{record_id}",
    response_model=SpecialistResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_self_or_admin)],
    summary="Get a specialist",
)
def get_specialist(
    specialist: Specialist = Depends(load_specialist),
    specialist_service: ResourceService = Depends(get_specialist_service),
):
    return specialist_service.get_record(specialist)


@router.put(
    "/{record_id}",
    response_model=SpecialistResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_self_or_admin)],
    summary="Replace a specialist",
)
def replace_specialist(
    body: SpecialistReplace,
    specialist: Specialist = Depends(load_specialist),
    specialist_service: ResourceService = Depends(get_specialist_service),
):
    return specialist_service.replace_record(specialist, body.model_dump(by_alias=True, exclude_none=True))


@router.patch(
    "/{record_id}",
    response_model=SpecialistResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_self_or_admin)],
    summary="Update a specialist",
)
def update_specialist(
    body: SpecialistUpdate,
    specialist: Specialist = Depends(load_specialist),
    specialist_service: ResourceService = Depends(get_specialist_service),
):
    return specialist_service.update_record(specialist, body.model_dump(by_alias=True, exclude_unset=True))


@router.delete(
    "/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_self_or_admin)],
    summary="Delete a specialist",
)
def delete_specialist(
    specialist: Specialist = Depends(load_specialist),
    specialist_service: ResourceService = Depends(get_specialist_service),
):
    specialist_service.delete_record(specialist)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
