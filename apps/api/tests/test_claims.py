"""Tests for the claims resource."""
from datetime import date

import pytest
from httpx import AsyncClient

from app.db.models import Appeal, Claim
from factories import make_claim, make_patient, make_payer


def _claim_body(patient_id, **overrides) -> dict:
    body = {
        "patient_id": str(patient_id),
        "claim_number": "CLM-2024-001",
        "service_date": "2024-03-01",
        "billed_amount": 1250.5,
        "procedure_codes": ["99213"],
        "diagnosis_codes": ["E11.9"],
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_create_claim_defaults(client_a: AsyncClient, db, org_a):
    patient = make_patient(db, org_a)

    response = await client_a.post("/api/claims", json=_claim_body(patient.id))
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "submitted"
    assert data["filing_date"] == date.today().isoformat()
    assert data["billed_amount"] == 1250.5
    assert data["procedure_codes"] == ["99213"]
    assert data["organization_id"] == str(org_a.id)


@pytest.mark.asyncio
async def test_create_claim_required_fields(client_a: AsyncClient):
    response = await client_a.post("/api/claims", json={"claim_number": "X"})
    assert response.status_code == 400
    assert response.json() == {"error": "Required fields: patient_id, service_date, billed_amount"}


@pytest.mark.asyncio
async def test_create_claim_for_other_orgs_patient(client_a: AsyncClient, db, org_b):
    foreign = make_patient(db, org_b)

    response = await client_a.post("/api/claims", json=_claim_body(foreign.id))
    assert response.status_code == 404
    assert response.json() == {"error": "Patient not found"}


@pytest.mark.asyncio
async def test_create_claim_with_malformed_patient_id(client_a: AsyncClient):
    response = await client_a.post("/api/claims", json=_claim_body("nope"))
    assert response.status_code == 404
    assert response.json() == {"error": "Patient not found"}


@pytest.mark.asyncio
async def test_create_claim_with_other_orgs_payer(client_a: AsyncClient, db, org_a, org_b):
    patient = make_patient(db, org_a)
    foreign_payer = make_payer(db, org_b)

    response = await client_a.post(
        "/api/claims", json=_claim_body(patient.id, payer_id=str(foreign_payer.id))
    )
    assert response.status_code == 404
    assert response.json() == {"error": "Payer not found"}


@pytest.mark.asyncio
async def test_create_claim_unknown_status(client_a: AsyncClient, db, org_a):
    patient = make_patient(db, org_a)

    response = await client_a.post("/api/claims", json=_claim_body(patient.id, status="lost_in_mail"))
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid status: lost_in_mail"}


@pytest.mark.asyncio
async def test_duplicate_claim_number(client_a: AsyncClient, db, org_a):
    patient = make_patient(db, org_a)
    assert (await client_a.post("/api/claims", json=_claim_body(patient.id))).status_code == 201

    response = await client_a.post("/api/claims", json=_claim_body(patient.id))
    assert response.status_code == 400
    assert response.json() == {"error": "Claim with this number already exists"}


@pytest.mark.asyncio
async def test_blank_claim_number_counts_as_missing(client_a: AsyncClient, db, org_a):
    patient = make_patient(db, org_a)
    response = await client_a.post("/api/claims", json=_claim_body(patient.id, claim_number="   "))
    assert response.status_code == 400
    assert response.json() == {"error": "Required fields: claim_number"}
    assert db.query(Claim).count() == 0


@pytest.mark.asyncio
async def test_read_one_embeds_patient_payer_and_appeals(client_a: AsyncClient, db, org_a):
    patient = make_patient(db, org_a, first_name="Ada")
    payer = make_payer(db, org_a, name="Medicare", type="medicare")
    claim = make_claim(db, org_a, patient, payer_id=payer.id)
    db.add(Appeal(organization_id=org_a.id, claim_id=claim.id, appeal_number="APL-TEST1"))
    db.commit()

    response = await client_a.get("/api/claims", params={"id": str(claim.id)})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["patient"]["first_name"] == "Ada"
    assert data["payer"] == {"id": str(payer.id), "name": "Medicare", "type": "medicare"}
    assert [a["appeal_number"] for a in data["appeals"]] == ["APL-TEST1"]


@pytest.mark.asyncio
async def test_list_filters(client_a: AsyncClient, db, org_a):
    first = make_patient(db, org_a, "MRN-1")
    second = make_patient(db, org_a, "MRN-2")
    make_claim(db, org_a, first, "C-1", status="denied")
    make_claim(db, org_a, first, "C-2", status="paid")
    make_claim(db, org_a, second, "C-3", status="denied")

    response = await client_a.get("/api/claims", params={"status": "denied"})
    assert sorted(c["claim_number"] for c in response.json()["data"]) == ["C-1", "C-3"]

    response = await client_a.get("/api/claims", params={"patient_id": str(first.id)})
    body = response.json()
    assert body["pagination"]["total"] == 2
    assert all(c["patient"]["mrn"] == "MRN-1" for c in body["data"])


@pytest.mark.asyncio
async def test_update_claim_status_without_transition_graph(client_a: AsyncClient, db, org_a):
    patient = make_patient(db, org_a)
    claim = make_claim(db, org_a, patient, status="paid")

    response = await client_a.put(
        "/api/claims",
        params={"id": str(claim.id)},
        json={"status": "denied", "denial_reason": "Missing prior authorization"},
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "denied"
    assert response.json()["data"]["denial_reason"] == "Missing prior authorization"


@pytest.mark.asyncio
async def test_update_claim_ignores_org_change(client_a: AsyncClient, db, org_a, org_b):
    patient = make_patient(db, org_a)
    claim = make_claim(db, org_a, patient)

    response = await client_a.put(
        "/api/claims",
        params={"id": str(claim.id)},
        json={"organization_id": str(org_b.id), "notes": "checked"},
    )
    assert response.status_code == 200
    assert response.json()["data"]["organization_id"] == str(org_a.id)
    assert response.json()["data"]["notes"] == "checked"


@pytest.mark.asyncio
async def test_tenant_isolation(client_a: AsyncClient, client_b: AsyncClient, db, org_a):
    patient = make_patient(db, org_a)
    claim = make_claim(db, org_a, patient)
    params = {"id": str(claim.id)}

    assert (await client_b.get("/api/claims", params=params)).status_code == 404
    assert (await client_b.put("/api/claims", params=params, json={"notes": "x"})).status_code == 404
    assert (await client_b.delete("/api/claims", params=params)).status_code == 404
    assert (await client_b.get("/api/claims")).json()["data"] == []
    assert (await client_a.get("/api/claims", params=params)).status_code == 200


@pytest.mark.asyncio
async def test_delete_twice(client_a: AsyncClient, db, org_a):
    patient = make_patient(db, org_a)
    claim = make_claim(db, org_a, patient)
    params = {"id": str(claim.id)}

    response = await client_a.delete("/api/claims", params=params)
    assert response.status_code == 200
    assert response.json() == {"message": "Claim deleted successfully"}

    response = await client_a.delete("/api/claims", params=params)
    assert response.status_code == 404
    assert response.json() == {"error": "Claim not found"}


@pytest.mark.asyncio
async def test_delete_requires_id(client_a: AsyncClient):
    response = await client_a.delete("/api/claims")
    assert response.status_code == 400
    assert response.json() == {"error": "Claim ID is required"}
