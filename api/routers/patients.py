"""
Patients router - patient management endpoints.

This router handles patient CRUD operations via RESTful endpoints.
All endpoints require a bearer token.

Architecture:
    HTTP Request → Router (this file) → ResourceService → ResourceRepository → MongoDB

Access Rules:
    - list, create: admin only
    - profile: any authenticated caller (their own record)
    - get, replace, update, delete: the patient themselves or an admin

Dependency Injection:
    Services are injected via FastAPI's Depends() mechanism.
    The DI chain is defined in core/dependencies.py.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from core.auth import Caller, get_current_caller, require_admin, require_self_or_admin
from core.config import DEFAULT_PER_PAGE, MAX_PER_PAGE
from core.dependencies import get_patient_service
from models.patient import Gender, Patient
from schemas import PatientCreate, PatientReplace, PatientResponse, PatientUpdate
from services import ResourceService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/v1/patients",
    tags=["Patients"],
)


def load_patient(
    record_id: str,
    patient_service: ResourceService = Depends(get_patient_service),
) -> Patient:
    """Resolve the ``record_id`` path parameter to a stored patient (404 otherwise)."""
    return patient_service.load(record_id)


# =============================================================================
# ENDPOINTS
# =============================================================================
# Note: endpoints are plain ``def`` so FastAPI runs the blocking MongoDB
# calls in its threadpool.

@router.get(
    "",
    response_model=List[PatientResponse],
    response_model_exclude_none=True,
    dependencies=[Depends(require_admin)],
    summary="List patients",
    description=f"List patients newest first. Filters are exact matches. "
                f"Default page size is {DEFAULT_PER_PAGE}, maximum is {MAX_PER_PAGE}."
)
def list_patients(
    page: int = Query(1, ge=1, description="1-based page number"),
    per_page: int = Query(DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE, alias="perPage"),
    specialistid: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    name: Optional[str] = Query(None),
    cpf: Optional[str] = Query(None),
    birthday: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    gender: Optional[Gender] = Query(None),
    patient_service: ResourceService = Depends(get_patient_service),
):
    """
    Get a page of patients.

    Query Parameters:
    - **page**: page number (default 1)
    - **perPage**: page size (1-100, default 30)
    - any patient field listed above as an exact-match filter
    """
    filters = {
        "specialistid": specialistid,
        "email": email,
        "name": name,
        "cpf": cpf,
        "birthday": birthday,
        "phone": phone,
        "address": address,
        "city": city,
        "state": state,
        "gender": gender,
    }
    return patient_service.list_records(filters, page=page, per_page=per_page)


@router.post(
    "",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
    summary="Create a new patient",
    description="Add a new patient. CPF must be unique; a duplicate returns 409 naming the field."
)
def create_patient(
    patient: PatientCreate,
    patient_service: ResourceService = Depends(get_patient_service),
):
    """
    Create a new patient.

    Note: duplicate-key and validation errors are raised by the service and
    handled by the exception handlers registered in main.py.
    """
    return patient_service.create_record(patient.model_dump(by_alias=True, exclude_none=True))


@router.get(
    "/profile",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    summary="Logged-in patient profile",
)
def patient_profile(
    caller: Caller = Depends(get_current_caller),
    patient_service: ResourceService = Depends(get_patient_service),
):
    """Return the caller's own patient record."""
    return patient_service.get_profile(caller.id)


@router.get(
    "/{record_id}",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_self_or_admin)],
    summary="Get a patient",
)
def get_patient(
    patient: Patient = Depends(load_patient),
    patient_service: ResourceService = Depends(get_patient_service),
):
    return patient_service.get_record(patient)


@router.put(
    "/{record_id}",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_self_or_admin)],
    summary="Replace a patient",
    description="Replace the whole patient document. The role can only be changed on admin records."
)
def replace_patient(
    body: PatientReplace,
    patient: Patient = Depends(load_patient),
    patient_service: ResourceService = Depends(get_patient_service),
):
    return patient_service.replace_record(patient, body.model_dump(by_alias=True, exclude_none=True))


@router.patch(
    "/{record_id}",
    response_model=PatientResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(require_self_or_admin)],
    summary="Update a patient",
    description="Update some fields of a patient. The role can only be changed on admin records."
)
def update_patient(
    body: PatientUpdate,
    patient: Patient = Depends(load_patient),
    patient_service: ResourceService = Depends(get_patient_service),
):
    return patient_service.update_record(patient, body.model_dump(by_alias=True, exclude_unset=True))


@router.delete(
    "/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_self_or_admin)],
    summary="Delete a patient",
)
def delete_patient(
    patient: Patient = Depends(load_patient),
    patient_service: ResourceService = Depends(get_patient_service),
):
    patient_service.delete_record(patient)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
