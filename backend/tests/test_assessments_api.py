import math
import uuid

from helpers import SUBMISSION, headers_for


class TestCreateAssessment:

    def test_public_submission_creates_pending_claim(self, client):
        response = client.post("/api/assessments", json=SUBMISSION)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["assessment"]["status"] == "pending"
        uuid.UUID(body["assessment"]["id"])

    def test_normalises_registration_vin_and_amount(self, client, admin_headers):
        payload = {**SUBMISSION, "registration": "abc123", "vin": "jt2bg22k1w0123456",
                   "insurance_value_amount": "$12,500"}
        created = client.post("/api/assessments", json=payload).json()

        detail = client.get(f"/api/assessments/{created['assessment']['id']}", headers=admin_headers).json()
        record = detail["data"]["assessment"]
        assert record["registration"] == "ABC123"
        assert record["vin"] == "JT2BG22K1W0123456"
        assert record["insurance_value_amount"] == 12500.0

    def test_unknown_type_falls_back_to_desktop(self, client, admin_headers):
        payload = {**SUBMISSION, "assessment_type": "Drone Assessment",
                   "location_info": {"address": "1 George St"}}
        created = client.post("/api/assessments", json=payload).json()

        record = client.get(f"/api/assessments/{created['assessment']['id']}",
                            headers=admin_headers).json()["data"]["assessment"]
        assert record["assessment_type"] == "Desktop Assessment"
        assert record["location_info"] == {}

    def test_onsite_keeps_location(self, client, admin_headers):
        payload = {**SUBMISSION, "assessment_type": "Onsite Assessment",
                   "location_info": {"address": "1 George St"}}
        created = client.post("/api/assessments", json=payload).json()

        record = client.get(f"/api/assessments/{created['assessment']['id']}",
                            headers=admin_headers).json()["data"]["assessment"]
        assert record["location_info"] == {"address": "1 George St"}

    def test_missing_required_field_is_rejected(self, client):
        payload = {k: v for k, v in SUBMISSION.items() if k != "company_name"}
        response = client.post("/api/assessments", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_invalid_email_is_rejected(self, client):
        response = client.post("/api/assessments", json={**SUBMISSION, "your_email": "not-an-email"})

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid email address"


class TestListAssessments:

    def test_requires_authentication(self, client):
        response = client.get("/api/assessments")
        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    def test_pagination_descriptor(self, client, admin_headers, make_assessment):
        for i in range(7):
            make_assessment(claim_reference=f"CLM-{i}")

        body = client.get("/api/assessments?page=1&pageSize=3", headers=admin_headers).json()

        assert len(body["data"]) == 3
        assert body["pagination"] == {"page": 1, "pageSize": 3, "total": 7, "totalPages": math.ceil(7 / 3)}

    def test_last_page_holds_remainder(self, client, admin_headers, make_assessment):
        for _ in range(7):
            make_assessment()

        body = client.get("/api/assessments?page=3&pageSize=3", headers=admin_headers).json()

        assert len(body["data"]) == 1
        assert body["pagination"]["totalPages"] == 3

    def test_empty_store(self, client, admin_headers):
        body = client.get("/api/assessments", headers=admin_headers).json()
        assert body["data"] == []
        assert body["pagination"] == {"page": 1, "pageSize": 20, "total": 0, "totalPages": 0}

    def test_filters_by_status_and_type(self, client, admin_headers, make_assessment):
        make_assessment(status="pending")
        make_assessment(status="completed")
        make_assessment(status="completed", assessment_type="Onsite Assessment")

        completed = client.get("/api/assessments?status=completed", headers=admin_headers).json()
        onsite = client.get("/api/assessments?type=Onsite%20Assessment", headers=admin_headers).json()

        assert completed["pagination"]["total"] == 2
        assert onsite["pagination"]["total"] == 1

    def test_summary_fields(self, client, admin_headers, make_assessment):
        make_assessment()
        row = client.get("/api/assessments", headers=admin_headers).json()["data"][0]
        assert set(row) == {
            "id", "company_name", "your_name", "your_email", "assessment_type",
            "make", "model", "registration", "status", "created_at",
        }


class TestGetAssessment:

    def test_returns_record_and_files(self, client, admin_headers, make_assessment):
        assessment = make_assessment()

        body = client.get(f"/api/assessments/{assessment.id}", headers=admin_headers).json()

        assert body["data"]["assessment"]["id"] == str(assessment.id)
        assert body["data"]["assessment"]["company_name"] == "NRMA Insurance"
        assert body["data"]["files"] == []

    def test_unknown_id_is_404(self, client, admin_headers):
        response = client.get(f"/api/assessments/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404
        assert response.json() == {"error": "Assessment not found"}


class TestUpdateAssessment:

    def test_pending_to_completed_is_reflected(self, client, admin_headers, make_assessment):
        assessment = make_assessment(status="pending")
        before = client.get(f"/api/assessments/{assessment.id}", headers=admin_headers).json()
        before_updated = before["data"]["assessment"]["updated_at"]

        response = client.patch(f"/api/assessments/{assessment.id}", json={"status": "completed"},
                                headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["success"] is True

        after = client.get(f"/api/assessments/{assessment.id}", headers=admin_headers).json()
        record = after["data"]["assessment"]
        assert record["status"] == "completed"
        assert record["updated_at"] != before_updated
        assert record["completed_at"] is not None

    def test_any_status_reachable_from_any_other(self, client, admin_headers, make_assessment):
        assessment = make_assessment(status="completed")

        for status in ("pending", "cancelled", "processing", "completed", "pending"):
            response = client.patch(f"/api/assessments/{assessment.id}", json={"status": status},
                                    headers=admin_headers)
            assert response.status_code == 200
            assert response.json()["data"]["status"] == status

    def test_status_outside_enum_is_rejected(self, client, admin_headers, make_assessment):
        assessment = make_assessment()
        response = client.patch(f"/api/assessments/{assessment.id}", json={"status": "archived"},
                                headers=admin_headers)
        assert response.status_code == 400

    def test_protected_keys_are_ignored(self, client, admin_headers, make_assessment):
        assessment = make_assessment()
        response = client.patch(
            f"/api/assessments/{assessment.id}",
            json={"id": str(uuid.uuid4()), "created_at": "2000-01-01T00:00:00", "make": "Mazda"},
            headers=admin_headers,
        )
        data = response.json()["data"]
        assert data["id"] == str(assessment.id)
        assert data["make"] == "Mazda"
        assert not data["created_at"].startswith("2000")

    def test_required_field_cannot_be_cleared(self, client, admin_headers, make_assessment):
        assessment = make_assessment()
        response = client.patch(f"/api/assessments/{assessment.id}", json={"company_name": None},
                                headers=admin_headers)
        assert response.status_code == 400
        assert "company_name" in response.json()["error"]

    def test_json_field_replaced_with_merged_object(self, client, admin_headers, make_assessment):
        assessment = make_assessment(owner_info={"firstName": "Tom", "lastName": "Owner"})
        response = client.patch(
            f"/api/assessments/{assessment.id}",
            json={"owner_info": {"firstName": "Tom", "lastName": "Owner", "mobile": "0400111222"}},
            headers=admin_headers,
        )
        assert response.json()["data"]["owner_info"]["mobile"] == "0400111222"

    def test_reviewer_may_edit(self, client, reviewer_user, make_assessment):
        assessment = make_assessment()
        response = client.patch(f"/api/assessments/{assessment.id}", json={"color": "Blue"},
                                headers=headers_for(reviewer_user))
        assert response.status_code == 200


class TestDeleteAssessment:

    def test_soft_delete_hides_record(self, client, admin_headers, make_assessment):
        assessment = make_assessment()

        response = client.delete(f"/api/assessments/{assessment.id}", headers=admin_headers)
        assert response.json() == {"success": True}

        assert client.get(f"/api/assessments/{assessment.id}", headers=admin_headers).status_code == 404
        listing = client.get("/api/assessments", headers=admin_headers).json()
        assert listing["pagination"]["total"] == 0

    def test_reviewer_cannot_delete(self, client, reviewer_user, make_assessment):
        assessment = make_assessment()
        response = client.delete(f"/api/assessments/{assessment.id}", headers=headers_for(reviewer_user))
        assert response.status_code == 403
        assert response.json() == {"error": "Insufficient permissions"}


class TestStats:

    def test_counts(self, client, admin_headers, make_assessment):
        make_assessment(status="pending")
        make_assessment(status="processing")
        make_assessment(status="completed", assessment_type="Onsite Assessment")
        deleted = make_assessment(status="completed")
        client.delete(f"/api/assessments/{deleted.id}", headers=admin_headers)

        stats = client.get("/api/assessments/stats", headers=admin_headers).json()["data"]

        assert stats == {
            "total": 3,
            "pending": 1,
            "processing": 1,
            "completed": 1,
            "desktop": 2,
            "onsite": 1,
            "recentSubmissions": 3,
        }


class TestMarkEntered:

    def test_sets_processing_and_appends_note(self, client, admin_headers, make_assessment):
        assessment = make_assessment(status="pending", internal_notes="Called the insurer")

        response = client.post(
            f"/api/assessments/{assessment.id}/iq-helper/mark-entered",
            json={"iqReference": "IQ-778"},
            headers=admin_headers,
        )

        body = response.json()
        assert body["success"] is True
        assert body["data"]["status"] == "processing"
        notes = body["data"]["internal_notes"]
        assert notes.startswith("Called the insurer\n\n[IQ Controls] Reference: IQ-778 - Entered at ")

    def test_without_reference_leaves_notes(self, client, admin_headers, make_assessment):
        assessment = make_assessment(status="completed")

        body = client.post(
            f"/api/assessments/{assessment.id}/iq-helper/mark-entered",
            json={},
            headers=admin_headers,
        ).json()

        assert body["data"]["status"] == "processing"
        assert body["data"]["internal_notes"] is None
