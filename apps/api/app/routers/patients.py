"""Patients API endpoints (tenant-scoped)."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.cors import DEFAULT_METHODS, register_resource_methods
from app.core.deps import get_db, get_tenant
from app.schemas.auth import TenantContext
from app.schemas.common import DataResponse, MessageResponse
from app.schemas.patient import PatientCreate, PatientDetail, PatientRead, PatientUpdate
from app.services import patient_service
from app.services.patient_service import DuplicatePatientError, PatientNotFoundError
from app.utils.pagination import Pagination, PaginationParams, get_pagination

router = APIRouter(prefix="/api/patients", tags=["patients"])
register_resource_methods(router.prefix, DEFAULT_METHODS)


@router.get("")
def read_patients(
    patient_id: str | None = Query(None, alias="id"),
    status: str | None = Query(None),
    search: str | None = Query(None),
    pagination: PaginationParams = Depends(get_pagination),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    """Read one patient (with claim stats) when id is given, else a page of patients."""
    if patient_id is not None:
        patient = patient_service.get_patient(db, tenant.org_id, patient_id)
        if not patient:
            raise HTTPException(status_code=404, detail="Patient not found")
        stats = patient_service.get_claim_stats(db, tenant.org_id, patient.id)
        detail = PatientDetail.model_validate(patient).model_copy(update={"claim_stats": stats})
        return {"data": detail}

    items, total = patient_service.list_patients(
        db, tenant.org_id, pagination, status=status, search=search
    )
    return {
        "data": [PatientRead.model_validate(p) for p in items],
        "pagination": Pagination.create(total, pagination),
    }


@router.post("", status_code=201, response_model=DataResponse[PatientRead])
def create_patient(
    data: PatientCreate,
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    try:
        patient = patient_service.create_patient(db, tenant.org_id, data)
    except DuplicatePatientError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"data": PatientRead.model_validate(patient)}


@router.put("", response_model=DataResponse[PatientRead])
def update_patient(
    data: PatientUpdate,
    patient_id: str | None = Query(None, alias="id"),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    if not patient_id:
        raise HTTPException(status_code=400, detail="Patient ID is required")
    try:
        patient = patient_service.update_patient(db, tenant.org_id, patient_id, data)
    except PatientNotFoundError:
        raise HTTPException(status_code=404, detail="Patient not found")
    except DuplicatePatientError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"data": PatientRead.model_validate(patient)}


@router.delete("", response_model=MessageResponse)
def delete_patient(
    patient_id: str | None = Query(None, alias="id"),
    tenant: TenantContext = Depends(get_tenant),
    db: Session = Depends(get_db),
):
    if not patient_id:
        raise HTTPException(status_code=400, detail="Patient ID is required")
    try:
        patient_service.delete_patient(db, tenant.org_id, patient_id)
    except PatientNotFoundError:
        raise HTTPException(status_code=404, detail="Patient not found")
    return {"message": "Patient deleted successfully"}
