"""Tests for the patients resource: CRUD contract and tenant isolation."""
import uuid
from datetime import datetime, timezone

import pytest
from httpx import AsyncClient

from app.db.models import Claim, Patient
from factories import make_claim, make_patient


PATIENT_BODY = {
    "mrn": "MRN-100",
    "first_name": "Ada",
    "last_name": "Lovelace",
    "date_of_birth": "1985-12-10",
    "insurance_provider": "Acme Health",
}


@pytest.mark.asyncio
async def test_create_then_fetch(client_a: AsyncClient, org_a):
    response = await client_a.post("/api/patients", json=PATIENT_BODY)
    assert response.status_code == 201
    created = response.json()["data"]
    assert created["organization_id"] == str(org_a.id)
    assert created["status"] == "active"

    response = await client_a.get("/api/patients", params={"id": created["id"]})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["mrn"] == "MRN-100"
    assert data["claim_stats"] == {"total": 0, "denied": 0, "appealed": 0}


@pytest.mark.asyncio
async def test_create_ignores_client_supplied_org(client_a: AsyncClient, org_a, org_b):
    body = {**PATIENT_BODY, "organization_id": str(org_b.id), "id": str(uuid.uuid4())}
    response = await client_a.post("/api/patients", json=body)
    assert response.status_code == 201
    assert response.json()["data"]["organization_id"] == str(org_a.id)
    assert response.json()["data"]["id"] != body["id"]


@pytest.mark.asyncio
async def test_create_requires_fields(client_a: AsyncClient):
    response = await client_a.post("/api/patients", json={"first_name": "Ada"})
    assert response.status_code == 400
    assert response.json() == {"error": "Required fields: mrn, last_name, date_of_birth"}


@pytest.mark.asyncio
async def test_create_empty_string_counts_as_missing(client_a: AsyncClient):
    response = await client_a.post("/api/patients", json={**PATIENT_BODY, "mrn": ""})
    assert response.status_code == 400
    assert response.json() == {"error": "Required fields: mrn"}


@pytest.mark.asyncio
async def test_create_blank_mrn_counts_as_missing(client_a: AsyncClient, db):
    response = await client_a.post("/api/patients", json={**PATIENT_BODY, "mrn": "   "})
    assert response.status_code == 400
    assert response.json() == {"error": "Required fields: mrn"}
    assert db.query(Patient).count() == 0


@pytest.mark.asyncio
async def test_update_blank_mrn_rejected(client_a: AsyncClient, db, org_a):
    patient = make_patient(db, org_a, "MRN-1")
    response = await client_a.put("/api/patients", params={"id": str(patient.id)}, json={"mrn": " \t "})
    assert response.status_code == 400
    assert response.json() == {"error": "Required fields: mrn"}

    db.expire_all()
    assert db.get(Patient, patient.id).mrn == "MRN-1"


@pytest.mark.asyncio
async def test_create_rejects_bad_date(client_a: AsyncClient):
    response = await client_a.post("/api/patients", json={**PATIENT_BODY, "date_of_birth": "yesterday"})
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request: date_of_birth")


@pytest.mark.asyncio
async def test_duplicate_mrn_in_same_org(client_a: AsyncClient):
    assert (await client_a.post("/api/patients", json=PATIENT_BODY)).status_code == 201
    response = await client_a.post("/api/patients", json=PATIENT_BODY)
    assert response.status_code == 400
    assert response.json() == {"error": "Patient with this MRN already exists"}


@pytest.mark.asyncio
async def test_same_mrn_allowed_across_orgs(client_a: AsyncClient, client_b: AsyncClient):
    assert (await client_a.post("/api/patients", json=PATIENT_BODY)).status_code == 201
    assert (await client_b.post("/api/patients", json=PATIENT_BODY)).status_code == 201


@pytest.mark.asyncio
async def test_read_one_claim_stats(client_a: AsyncClient, db, org_a):
    patient = make_patient(db, org_a)
    make_claim(db, org_a, patient, "C-1", status="denied")
    make_claim(db, org_a, patient, "C-2", status="denied")
    make_claim(db, org_a, patient, "C-3", status="appealed")
    make_claim(db, org_a, patient, "C-4", status="paid")

    response = await client_a.get("/api/patients", params={"id": str(patient.id)})
    assert response.json()["data"]["claim_stats"] == {"total": 4, "denied": 2, "appealed": 1}


@pytest.mark.asyncio
async def test_list_filters_by_search_and_status(client_a: AsyncClient, db, org_a):
    make_patient(db, org_a, "MRN-A", first_name="Grace", last_name="Hopper")
    make_patient(db, org_a, "MRN-B", first_name="Alan", last_name="Turing", status="inactive")

    response = await client_a.get("/api/patients", params={"search": "HOPP"})
    names = [p["last_name"] for p in response.json()["data"]]
    assert names == ["Hopper"]

    response = await client_a.get("/api/patients", params={"search": "mrn-b"})
    assert [p["mrn"] for p in response.json()["data"]] == ["MRN-B"]

    response = await client_a.get("/api/patients", params={"status": "inactive"})
    assert [p["mrn"] for p in response.json()["data"]] == ["MRN-B"]


@pytest.mark.asyncio
async def test_pagination_invariant(client_a: AsyncClient, db, org_a):
    for i in range(25):
        make_patient(db, org_a, f"MRN-{i:03d}")

    seen = []
    for page in (1, 2, 3):
        response = await client_a.get("/api/patients", params={"page": page, "limit": 10})
        body = response.json()
        assert body["pagination"] == {"page": page, "limit": 10, "total": 25, "totalPages": 3}
        seen.extend(p["id"] for p in body["data"])
    assert len(seen) == 25
    assert len(set(seen)) == 25

    response = await client_a.get("/api/patients", params={"page": 4, "limit": 10})
    assert response.json()["data"] == []
    assert response.json()["pagination"]["total"] == 25


@pytest.mark.asyncio
async def test_pagination_stable_for_equal_timestamps(client_a: AsyncClient, db, org_a):
    created_at = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ids = [str(make_patient(db, org_a, f"MRN-{i}", created_at=created_at).id) for i in range(7)]

    seen = []
    for page in (1, 2, 3, 4):
        response = await client_a.get("/api/patients", params={"page": page, "limit": 2})
        seen.extend(p["id"] for p in response.json()["data"])

    # Ties on created_at fall back to id, newest-first
    assert seen == sorted(ids, key=uuid.UUID, reverse=True)


@pytest.mark.asyncio
async def test_pagination_defaults(client_a: AsyncClient):
    response = await client_a.get("/api/patients")
    assert response.json()["pagination"] == {"page": 1, "limit": 20, "total": 0, "totalPages": 0}


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}, {"page": "abc"}])
async def test_invalid_pagination_is_bad_request(client_a: AsyncClient, params):
    response = await client_a.get("/api/patients", params=params)
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request")


@pytest.mark.asyncio
async def test_update_strips_protected_fields(client_a: AsyncClient, db, org_a, org_b):
    patient = make_patient(db, org_a)
    original_id = str(patient.id)

    response = await client_a.put(
        "/api/patients",
        params={"id": original_id},
        json={
            "first_name": "Janet",
            "id": str(uuid.uuid4()),
            "organization_id": str(org_b.id),
            "created_at": "2001-01-01T00:00:00Z",
            "unknown_field": "ignored",
        },
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == original_id
    assert data["organization_id"] == str(org_a.id)
    assert data["first_name"] == "Janet"
    assert not data["created_at"].startswith("2001")


@pytest.mark.asyncio
async def test_update_requires_id(client_a: AsyncClient):
    response = await client_a.put("/api/patients", json={"first_name": "X"})
    assert response.status_code == 400
    assert response.json() == {"error": "Patient ID is required"}


@pytest.mark.asyncio
async def test_update_duplicate_mrn(client_a: AsyncClient, db, org_a):
    make_patient(db, org_a, "MRN-1")
    other = make_patient(db, org_a, "MRN-2")

    response = await client_a.put("/api/patients", params={"id": str(other.id)}, json={"mrn": "MRN-1"})
    assert response.status_code == 400
    assert response.json() == {"error": "Patient with this MRN already exists"}


@pytest.mark.asyncio
async def test_tenant_isolation_on_all_verbs(client_a: AsyncClient, client_b: AsyncClient, db, org_a):
    patient = make_patient(db, org_a)
    params = {"id": str(patient.id)}

    response = await client_b.get("/api/patients", params=params)
    assert response.status_code == 404
    assert response.json() == {"error": "Patient not found"}

    response = await client_b.get("/api/patients")
    assert response.json()["data"] == []

    response = await client_b.put("/api/patients", params=params, json={"first_name": "Mallory"})
    assert response.status_code == 404

    response = await client_b.delete("/api/patients", params=params)
    assert response.status_code == 404

    # Untouched for the owner
    response = await client_a.get("/api/patients", params=params)
    assert response.status_code == 200
    assert response.json()["data"]["first_name"] == "Jane"


@pytest.mark.asyncio
async def test_malformed_id_is_not_found(client_a: AsyncClient):
    response = await client_a.get("/api/patients", params={"id": "not-a-uuid"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_delete_is_defined_twice(client_a: AsyncClient, db, org_a):
    patient = make_patient(db, org_a)
    params = {"id": str(patient.id)}

    response = await client_a.delete("/api/patients", params=params)
    assert response.status_code == 200
    assert response.json() == {"message": "Patient deleted successfully"}

    response = await client_a.delete("/api/patients", params=params)
    assert response.status_code == 404
    assert response.json() == {"error": "Patient not found"}


@pytest.mark.asyncio
async def test_delete_cascades_to_claims(client_a: AsyncClient, db, org_a):
    patient = make_patient(db, org_a)
    claim = make_claim(db, org_a, patient)
    patient_id, claim_id = patient.id, claim.id

    response = await client_a.delete("/api/patients", params={"id": str(patient_id)})
    assert response.status_code == 200

    db.expire_all()
    assert db.get(Patient, patient_id) is None
    assert db.get(Claim, claim_id) is None
