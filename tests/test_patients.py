"""
Tests for patient endpoints.
"""
from bson import ObjectId

from tests.factories import auth_headers, patient_payload


# =============================================================================
# CREATE
# =============================================================================

def test_create_patient_success(client, admin_headers):
    """Test successful patient creation returns the public view."""
    payload = patient_payload()
    response = client.post("/v1/patients", json=payload, headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Maria Silva"
    assert data["specialistid"] == payload["specialistid"]
    assert data["gender"] == "nao_informado"
    assert data["role"] == "patient"
    assert len(data["id"]) == 24
    assert data["createdAt"].endswith("Z")
    assert "updatedAt" not in data


def test_create_patient_field_order(client, admin_headers):
    """Public view keys come out in a fixed order."""
    response = client.post("/v1/patients", json=patient_payload(), headers=admin_headers)
    assert list(response.json()) == [
        "id", "specialistid", "name", "email", "cpf", "gender", "birthday",
        "address", "city", "state", "phone", "role", "createdAt",
    ]


def test_create_patient_normalizes_email_and_cpf(client, admin_headers):
    """Test email and cpf are lowercased before storing."""
    response = client.post(
        "/v1/patients",
        json=patient_payload(email="Maria@Example.COM", cpf="ABC123"),
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["email"] == "maria@example.com"
    assert response.json()["cpf"] == "abc123"


def test_create_patient_normalizes_contact_fields(client, admin_headers):
    """Test address, city, state and phone are lowercased before storing."""
    body = patient_payload(address="Rua A, 1 Bloco B", city="Sao Paulo", state="SP", phone="11 9999-X")
    response = client.post("/v1/patients", json=body, headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["address"] == "rua a, 1 bloco b"
    assert data["city"] == "sao paulo"
    assert data["state"] == "sp"
    assert data["phone"] == "11 9999-x"
    assert data["name"] == "Maria Silva"

    by_city = client.get("/v1/patients", params={"city": "SAO PAULO"}, headers=admin_headers).json()
    assert [p["id"] for p in by_city] == [data["id"]]


def test_create_patient_duplicate_cpf(client, admin_headers):
    """Test creating a patient with a taken CPF returns 409 naming cpf."""
    response1 = client.post("/v1/patients", json=patient_payload(), headers=admin_headers)
    assert response1.status_code == 201

    response2 = client.post(
        "/v1/patients",
        json=patient_payload(email="other@example.com"),
        headers=admin_headers,
    )
    assert response2.status_code == 409
    assert response2.json() == {
        "detail": "Validation Error",
        "errors": [{"field": "cpf", "location": "body", "messages": ['"cpf" already exists']}],
    }


def test_create_patient_duplicate_email_allowed(client, admin_headers):
    """Patient e-mails are not unique."""
    client.post("/v1/patients", json=patient_payload(), headers=admin_headers)
    response = client.post("/v1/patients", json=patient_payload(cpf="999"), headers=admin_headers)
    assert response.status_code == 201


def test_create_patient_validation_missing_field(client, admin_headers):
    """Test patient creation without a required field returns 400."""
    payload = patient_payload()
    del payload["cpf"]
    response = client.post("/v1/patients", json=payload, headers=admin_headers)
    assert response.status_code == 400
    data = response.json()
    assert data["detail"] == "Validation Error"
    assert {"field": "cpf", "location": "body"} == {
        key: data["errors"][0][key] for key in ("field", "location")
    }


def test_create_patient_validation_bad_values(client, admin_headers):
    """Test malformed birthday, e-mail and gender are rejected."""
    response = client.post(
        "/v1/patients",
        json=patient_payload(birthday="31/01/90", email="not-an-email", gender="other"),
        headers=admin_headers,
    )
    assert response.status_code == 400
    fields = {error["field"] for error in response.json()["errors"]}
    assert fields == {"birthday", "email", "gender"}


def test_create_patient_bad_specialist_reference(client, admin_headers):
    """Test specialistid must be a 24-hex id."""
    response = client.post(
        "/v1/patients",
        json=patient_payload(specialistid="123"),
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "specialistid"


def test_create_patient_requires_admin(client, patient_headers):
    """Test non-admin callers cannot create patients."""
    response = client.post("/v1/patients", json=patient_payload(cpf="777"), headers=patient_headers)
    assert response.status_code == 403


def test_create_then_get_round_trip(client, admin_headers):
    """Test the created view equals the fetched view."""
    created = client.post("/v1/patients", json=patient_payload(), headers=admin_headers).json()
    fetched = client.get(f"/v1/patients/{created['id']}", headers=admin_headers)
    assert fetched.status_code == 200
    assert fetched.json() == created


# =============================================================================
# LIST
# =============================================================================

def test_list_patients_empty(client, admin_headers):
    """Test listing patients when the collection is empty."""
    response = client.get("/v1/patients", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == []


def test_list_patients_newest_first(client, admin_headers, patient_repo):
    """Test patients are listed by creation time, newest first."""
    for index in range(3):
        patient_repo.create(patient_payload(cpf=f"cpf-{index}", name=f"Patient {index}"))

    response = client.get("/v1/patients", headers=admin_headers)
    assert response.status_code == 200
    names = [patient["name"] for patient in response.json()]
    assert names == ["Patient 2", "Patient 1", "Patient 0"]


def test_list_patients_default_page_size(client, admin_headers, patient_repo):
    """Test a page holds at most 30 patients and pages continue."""
    for index in range(35):
        patient_repo.create(patient_payload(cpf=f"cpf-{index}"))

    first = client.get("/v1/patients", headers=admin_headers)
    second = client.get("/v1/patients", params={"page": 2}, headers=admin_headers)
    assert len(first.json()) == 30
    assert len(second.json()) == 5
    assert not {p["id"] for p in first.json()} & {p["id"] for p in second.json()}


def test_list_patients_per_page(client, admin_headers, patient_repo):
    """Test perPage bounds the page size and is capped."""
    for index in range(5):
        patient_repo.create(patient_payload(cpf=f"cpf-{index}"))

    response = client.get("/v1/patients", params={"perPage": 2}, headers=admin_headers)
    assert len(response.json()) == 2

    response = client.get("/v1/patients", params={"perPage": 1000}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["errors"][0]["location"] == "query"


def test_list_patients_filters_exact_match(client, admin_headers, patient_repo):
    """Test filters match field values exactly."""
    specialist_id = str(ObjectId())
    patient_repo.create(patient_payload(cpf="1", city="Recife", specialistid=specialist_id))
    patient_repo.create(patient_payload(cpf="2", city="Recife"))
    patient_repo.create(patient_payload(cpf="3", city="Recife Antigo"))

    by_city = client.get("/v1/patients", params={"city": "Recife"}, headers=admin_headers).json()
    assert {p["cpf"] for p in by_city} == {"1", "2"}

    by_specialist = client.get(
        "/v1/patients", params={"specialistid": specialist_id}, headers=admin_headers
    ).json()
    assert [p["cpf"] for p in by_specialist] == ["1"]


def test_list_patients_requires_admin(client, patient_headers):
    """Test non-admin callers cannot list patients."""
    response = client.get("/v1/patients", headers=patient_headers)
    assert response.status_code == 403


# =============================================================================
# GET / PROFILE
# =============================================================================

def test_get_patient_self(client, existing_patient, patient_headers):
    """Test a patient can read their own record."""
    response = client.get(f"/v1/patients/{existing_patient.id}", headers=patient_headers)
    assert response.status_code == 200
    assert response.json()["id"] == existing_patient.id


def test_get_patient_other_forbidden(client, patient_repo, patient_headers):
    """Test a patient cannot read someone else's record."""
    other = patient_repo.create(patient_payload(cpf="other"))
    response = client.get(f"/v1/patients/{other.id}", headers=patient_headers)
    assert response.status_code == 403


def test_get_patient_malformed_id(client, admin_headers):
    """Test a malformed id returns 404, not a server error."""
    response = client.get("/v1/patients/not-an-id", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Patient does not exist"


def test_get_patient_unknown_id(client, admin_headers):
    """Test a well-formed id without a record returns 404."""
    response = client.get(f"/v1/patients/{ObjectId()}", headers=admin_headers)
    assert response.status_code == 404


def test_patient_profile(client, existing_patient, patient_headers):
    """Test the profile endpoint returns the caller's record."""
    response = client.get("/v1/patients/profile", headers=patient_headers)
    assert response.status_code == 200
    assert response.json()["id"] == existing_patient.id


def test_patient_profile_without_record(client, admin_headers):
    """Test the profile endpoint returns 404 when the caller has no patient record."""
    response = client.get("/v1/patients/profile", headers=admin_headers)
    assert response.status_code == 404


# =============================================================================
# REPLACE / UPDATE
# =============================================================================

def test_replace_patient(client, existing_patient, patient_headers):
    """Test PUT overwrites the record and keeps identity and createdAt."""
    before = client.get(f"/v1/patients/{existing_patient.id}", headers=patient_headers).json()
    body = patient_payload(name="Maria Souza", city="Campinas", gender="feminino")
    response = client.put(f"/v1/patients/{existing_patient.id}", json=body, headers=patient_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Maria Souza"
    assert data["city"] == "campinas"
    assert data["gender"] == "feminino"
    assert data["id"] == before["id"]
    assert data["createdAt"] == before["createdAt"]


def test_replace_patient_missing_field(client, existing_patient, patient_headers):
    """Test PUT requires every required field."""
    body = patient_payload()
    del body["phone"]
    response = client.put(f"/v1/patients/{existing_patient.id}", json=body, headers=patient_headers)
    assert response.status_code == 400


def test_replace_patient_duplicate_cpf(client, patient_repo, existing_patient, admin_headers):
    """Test PUT onto another patient's CPF returns 409."""
    patient_repo.create(patient_payload(cpf="taken"))
    response = client.put(
        f"/v1/patients/{existing_patient.id}",
        json=patient_payload(cpf="taken"),
        headers=admin_headers,
    )
    assert response.status_code == 409
    assert response.json()["errors"][0]["field"] == "cpf"


def test_update_patient_partial(client, existing_patient, patient_headers):
    """Test PATCH changes only the supplied fields."""
    response = client.patch(
        f"/v1/patients/{existing_patient.id}",
        json={"phone": "11911112222"},
        headers=patient_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["phone"] == "11911112222"
    assert data["name"] == existing_patient.name
    assert data["cpf"] == existing_patient.cpf


def test_update_patient_invalid_value(client, existing_patient, patient_headers):
    """Test PATCH validates supplied values."""
    response = client.patch(
        f"/v1/patients/{existing_patient.id}",
        json={"birthday": "1990"},
        headers=patient_headers,
    )
    assert response.status_code == 400


def test_update_patient_cannot_clear_required_field(client, existing_patient, patient_headers):
    """Test PATCH with null on a required field is a validation error."""
    response = client.patch(
        f"/v1/patients/{existing_patient.id}",
        json={"name": None},
        headers=patient_headers,
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "name"


def test_update_patient_other_forbidden(client, patient_repo, patient_headers):
    """Test a patient cannot update someone else's record."""
    other = patient_repo.create(patient_payload(cpf="other"))
    response = client.patch(f"/v1/patients/{other.id}", json={"name": "X"}, headers=patient_headers)
    assert response.status_code == 403


# =============================================================================
# ROLE MASKING
# =============================================================================

def test_patient_cannot_promote_self(client, existing_patient, patient_headers):
    """Test role in a PATCH body is ignored on a non-admin record."""
    response = client.patch(
        f"/v1/patients/{existing_patient.id}",
        json={"role": "admin", "name": "Still Patient"},
        headers=patient_headers,
    )
    assert response.status_code == 200
    assert response.json()["role"] == "patient"
    assert response.json()["name"] == "Still Patient"


def test_admin_cannot_change_role_of_non_admin_record(client, existing_patient, admin_headers):
    """Test the stored record's role decides, not the caller's."""
    response = client.put(
        f"/v1/patients/{existing_patient.id}",
        json=patient_payload(role="admin"),
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["role"] == "patient"


def test_admin_record_role_can_change(client, patient_repo, admin_headers):
    """Test role changes are honored when the stored record is an admin."""
    admin_record = patient_repo.create(patient_payload(cpf="adm", role="admin"))
    response = client.patch(
        f"/v1/patients/{admin_record.id}",
        json={"role": "specialist"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["role"] == "specialist"


def test_replace_without_role_keeps_admin_role(client, patient_repo, admin_headers):
    """Test PUT without role keeps the stored role."""
    admin_record = patient_repo.create(patient_payload(cpf="adm", role="admin"))
    response = client.put(
        f"/v1/patients/{admin_record.id}",
        json=patient_payload(cpf="adm"),
        headers=auth_headers(admin_record.id, "admin"),
    )
    assert response.status_code == 200
    assert response.json()["role"] == "admin"


# =============================================================================
# DELETE
# =============================================================================

def test_delete_patient(client, existing_patient, patient_headers, admin_headers):
    """Test DELETE returns 204 with an empty body and removes the record."""
    response = client.delete(f"/v1/patients/{existing_patient.id}", headers=patient_headers)
    assert response.status_code == 204
    assert response.content == b""

    response = client.get(f"/v1/patients/{existing_patient.id}", headers=admin_headers)
    assert response.status_code == 404


def test_delete_patient_unknown_id(client, admin_headers):
    """Test DELETE of an unknown id returns 404."""
    response = client.delete(f"/v1/patients/{ObjectId()}", headers=admin_headers)
    assert response.status_code == 404


def test_delete_patient_other_forbidden(client, patient_repo, patient_headers):
    """Test a patient cannot delete someone else's record."""
    other = patient_repo.create(patient_payload(cpf="other"))
    response = client.delete(f"/v1/patients/{other.id}", headers=patient_headers)
    assert response.status_code == 403
