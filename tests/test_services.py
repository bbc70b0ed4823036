"""
Tests for the service layer: duplicate-key translation, role policy and
ResourceService orchestration.
"""
import pytest

from core.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from models import PATIENT, SPECIALIST
from services import apply_role_policy, translate_duplicate_key
from tests.factories import patient_payload, specialist_payload


# =============================================================================
# DUPLICATE-KEY TRANSLATION
# =============================================================================

class TestTranslateDuplicateKey:
    """Test suite for translate_duplicate_key."""

    @pytest.mark.parametrize(
        "descriptor, fields, expected",
        [
            (PATIENT, ("cpf",), "cpf"),
            (PATIENT, ("email",), "email"),
            (PATIENT, ("email", "cpf"), "email"),
            (PATIENT, (), "cpf"),
            (PATIENT, ("name",), "cpf"),
            (SPECIALIST, ("crp",), "crp"),
            (SPECIALIST, ("crp", "email"), "email"),
            (SPECIALIST, (), "crp"),
        ],
    )
    def test_reported_field(self, descriptor, fields, expected):
        error = translate_duplicate_key(DuplicateKeyError(fields=fields), descriptor)
        assert isinstance(error, ValidationError)
        assert error.status_code == 409
        assert error.to_dict() == {
            "detail": "Validation Error",
            "errors": [{"field": expected, "location": "body", "messages": [f'"{expected}" already exists']}],
        }

    def test_other_errors_pass_through(self):
        original = NotFoundError(resource="Patient")
        assert translate_duplicate_key(original, PATIENT) is original

    def test_plain_exception_passes_through(self):
        original = RuntimeError("boom")
        assert translate_duplicate_key(original, SPECIALIST) is original


# =============================================================================
# ROLE POLICY
# =============================================================================

class TestRolePolicy:
    """Test suite for apply_role_policy."""

    @pytest.mark.parametrize("current_role", ["patient", "specialist"])
    def test_role_stripped_for_non_admin_records(self, current_role):
        fields = {"role": "admin", "name": "X"}
        assert apply_role_policy(current_role, fields) == {"name": "X"}

    def test_role_kept_for_admin_records(self):
        fields = {"role": "patient", "name": "X"}
        assert apply_role_policy("admin", fields) == fields

    def test_input_not_mutated(self):
        fields = {"role": "admin"}
        apply_role_policy("patient", fields)
        assert fields == {"role": "admin"}


# =============================================================================
# RESOURCE SERVICE
# =============================================================================

class TestResourceService:
    """Test suite for ResourceService."""

    def test_create_returns_public_view(self, patient_service):
        view = patient_service.create_record(patient_payload())
        assert "updatedAt" not in view
        assert view["role"] == "patient"

    def test_create_duplicate_translated(self, specialist_service):
        specialist_service.create_record(specialist_payload())
        with pytest.raises(ValidationError) as exc_info:
            specialist_service.create_record(specialist_payload(crp="other"))
        assert exc_info.value.status_code == 409
        assert exc_info.value.errors[0]["field"] == "email"
        assert isinstance(exc_info.value.__cause__, DuplicateKeyError)

    def test_update_masks_role(self, patient_service):
        created = patient_service.create_record(patient_payload())
        existing = patient_service.load(created["id"])
        view = patient_service.update_record(existing, {"role": "admin"})
        assert view["role"] == "patient"

    def test_replace_duplicate_translated(self, patient_service):
        patient_service.create_record(patient_payload(cpf="a"))
        created = patient_service.create_record(patient_payload(cpf="b"))
        existing = patient_service.load(created["id"])
        with pytest.raises(ValidationError) as exc_info:
            patient_service.replace_record(existing, patient_payload(cpf="a"))
        assert exc_info.value.errors[0]["field"] == "cpf"

    def test_list_records(self, patient_service):
        patient_service.create_record(patient_payload(cpf="a", state="RJ"))
        patient_service.create_record(patient_payload(cpf="b", state="SP"))
        views = patient_service.list_records({"state": "RJ"}, page=1, per_page=30)
        assert [view["cpf"] for view in views] == ["a"]

    def test_delete_record(self, patient_service):
        created = patient_service.create_record(patient_payload())
        existing = patient_service.load(created["id"])
        patient_service.delete_record(existing)
        with pytest.raises(NotFoundError):
            patient_service.load(created["id"])

    def test_profile_missing(self, specialist_service):
        with pytest.raises(NotFoundError):
            specialist_service.get_profile("5f8d0d55b54764421b7156c3")
