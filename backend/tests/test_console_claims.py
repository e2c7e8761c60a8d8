import httpx
import pytest

from crashify.console.api_client import AdminApiClient, ApiError, UploadItem
from crashify.console.assessment_detail import AssessmentDetailView
from crashify.console.claims_list import ClaimsListView
from crashify.console.toast import ToastCenter


def count_calls(api, name):
    """Wrap an AdminApiClient coroutine method and count its calls."""
    calls = []
    original = getattr(api, name)

    async def wrapper(*args, **kwargs):
        calls.append((args, kwargs))
        return await original(*args, **kwargs)

    setattr(api, name, wrapper)
    return calls


def bad_body_client(body):
    """AdminApiClient whose every call gets `body` back with a 200."""
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
    http = httpx.AsyncClient(transport=transport, base_url="http://test")
    return AdminApiClient(base_url="http://test", token="t", client=http)


class TestClaimsListView:

    @pytest.mark.asyncio
    async def test_pagination_flags(self, admin_api, make_assessment):
        for _ in range(5):
            make_assessment()
        view = ClaimsListView(admin_api, ToastCenter(), page_size=2)

        assert await view.load(1)
        assert len(view.rows) == 2
        assert view.total_pages == 3
        assert view.has_previous is False
        assert view.has_next is True

        assert await view.next_page()
        assert view.page == 2
        assert view.has_previous is True

        assert await view.load(3)
        assert len(view.rows) == 1
        assert view.has_next is False

    @pytest.mark.asyncio
    async def test_boundaries_do_not_fetch(self, admin_api, make_assessment):
        make_assessment()
        view = ClaimsListView(admin_api, ToastCenter())
        await view.load(1)
        calls = count_calls(admin_api, "list_assessments")

        assert await view.previous_page() is False
        assert await view.next_page() is False
        assert calls == []

    @pytest.mark.asyncio
    async def test_every_page_change_refetches(self, admin_api, make_assessment):
        for _ in range(3):
            make_assessment()
        view = ClaimsListView(admin_api, ToastCenter(), page_size=1)
        calls = count_calls(admin_api, "list_assessments")

        await view.load(1)
        await view.next_page()
        await view.previous_page()

        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_failure_sets_banner_and_keeps_rows(self, admin_api, make_assessment):
        make_assessment()
        view = ClaimsListView(admin_api, ToastCenter())
        await view.load(1)
        rows = list(view.rows)

        admin_api.token = None
        assert await view.refresh() is False

        assert view.error == "Not authenticated"
        assert view.rows == rows

    @pytest.mark.asyncio
    async def test_malformed_pagination_sets_banner(self):
        api = bad_body_client({"data": [], "pagination": {}})
        view = ClaimsListView(api, ToastCenter())
        view.rows = [{"id": "kept"}]

        assert await view.load(1) is False

        assert view.error == "Invalid response from server"
        assert view.rows == [{"id": "kept"}]
        assert view.loading is False
        await api.aclose()

    @pytest.mark.asyncio
    async def test_open_returns_detail_view(self, admin_api, make_assessment):
        assessment = make_assessment()
        view = ClaimsListView(admin_api, ToastCenter())
        await view.load(1)

        detail = view.open(view.rows[0]["id"])

        assert isinstance(detail, AssessmentDetailView)
        assert detail.assessment_id == str(assessment.id)
        assert detail.on_reload == view.refresh


class TestAssessmentDetailView:

    @pytest.mark.asyncio
    async def test_load_fetches_record_and_files(self, admin_api, make_assessment):
        assessment = make_assessment()
        view = AssessmentDetailView(admin_api, ToastCenter(), assessment.id)

        assert await view.load()

        assert view.record["company_name"] == "NRMA Insurance"
        assert view.files == []

    @pytest.mark.asyncio
    async def test_malformed_record_sets_banner(self):
        api = bad_body_client({"data": {}})
        view = AssessmentDetailView(api, ToastCenter(), "a1")

        assert await view.load() is False

        assert view.error == "Invalid response from server"
        assert view.record is None
        await api.aclose()

    @pytest.mark.asyncio
    async def test_edit_seeds_and_unchanged_save_still_patches(self, admin_api, make_assessment):
        assessment = make_assessment(color="Silver")
        view = AssessmentDetailView(admin_api, ToastCenter(), assessment.id)
        await view.load()
        calls = count_calls(admin_api, "update_assessment")

        editor = view.start_edit("color")
        assert editor.state == "editing"
        assert editor.staged == "Silver"

        assert await view.save_field("color")
        assert calls == [((str(assessment.id), {"color": "Silver"}), {})]
        assert editor.state == "view"

    @pytest.mark.asyncio
    async def test_cancel_discards_without_network(self, admin_api, make_assessment):
        assessment = make_assessment(color="Silver")
        view = AssessmentDetailView(admin_api, ToastCenter(), assessment.id)
        await view.load()
        calls = count_calls(admin_api, "update_assessment")

        view.start_edit("color")
        view.stage("color", "Red")
        view.cancel_edit("color")

        assert calls == []
        assert view.editors["color"].state == "view"
        assert view.editors["color"].staged is None
        assert view.record["color"] == "Silver"

    @pytest.mark.asyncio
    async def test_save_updates_local_record(self, admin_api, make_assessment):
        assessment = make_assessment()
        toasts = ToastCenter()
        view = AssessmentDetailView(admin_api, toasts, assessment.id)
        await view.load()

        view.start_edit("make")
        view.stage("make", "Honda")
        await view.save_field("make")

        assert view.record["make"] == "Honda"
        assert "Changes saved" in toasts.messages("success")

    @pytest.mark.asyncio
    async def test_failed_save_stays_editing(self, admin_api, make_assessment):
        assessment = make_assessment()
        toasts = ToastCenter()
        view = AssessmentDetailView(admin_api, toasts, assessment.id)
        await view.load()

        view.start_edit("year")
        view.stage("year", "not-a-year")

        assert await view.save_field("year") is False
        assert view.editors["year"].state == "editing"
        assert view.editors["year"].staged == "not-a-year"
        assert toasts.messages("error")

    @pytest.mark.asyncio
    async def test_json_field_shallow_merge(self, admin_api, make_assessment):
        assessment = make_assessment(owner_info={"firstName": "Tom", "lastName": "Owner", "email": "tom@example.com"})
        view = AssessmentDetailView(admin_api, ToastCenter(), assessment.id)
        await view.load()

        assert await view.save_json_field("owner_info", {"lastName": "Baker", "mobile": "0400111222"})

        assert view.record["owner_info"] == {
            "firstName": "Tom", "lastName": "Baker", "email": "tom@example.com", "mobile": "0400111222",
        }

    @pytest.mark.asyncio
    async def test_status_requires_toggle_and_accepts_any_value(self, admin_api, make_assessment):
        assessment = make_assessment(status="pending")
        view = AssessmentDetailView(admin_api, ToastCenter(), assessment.id)
        await view.load()

        assert await view.change_status("completed") is False

        view.toggle_status_edit()
        assert await view.change_status("completed")
        assert view.record["status"] == "completed"
        assert view.status_label == "Completed"
        assert view.status_editing is False

        for status in ("cancelled", "pending", "processing"):
            view.toggle_status_edit()
            assert await view.change_status(status)

    @pytest.mark.asyncio
    async def test_delete_needs_confirmation(self, admin_api, make_assessment):
        assessment = make_assessment()
        view = AssessmentDetailView(admin_api, ToastCenter(), assessment.id, confirm=lambda message: False)
        await view.load()

        assert await view.delete() is False
        assert await admin_api.get_assessment(str(assessment.id))

    @pytest.mark.asyncio
    async def test_delete_closes_and_reloads_parent(self, admin_api, make_assessment):
        assessment = make_assessment()
        reloaded = []

        async def on_reload():
            reloaded.append(True)

        view = AssessmentDetailView(admin_api, ToastCenter(), assessment.id,
                                    confirm=lambda message: True, on_reload=on_reload)
        await view.load()

        assert await view.delete()
        assert view.closed is True
        assert reloaded == [True]
        with pytest.raises(ApiError) as exc:
            await admin_api.get_assessment(str(assessment.id))
        assert exc.value.status_code == 404

    @pytest.mark.asyncio
    async def test_failed_delete_stays_open(self, console_factory, reviewer_user, make_assessment):
        assessment = make_assessment()
        toasts = ToastCenter()
        view = AssessmentDetailView(console_factory(reviewer_user), toasts, assessment.id,
                                    confirm=lambda message: True)
        await view.load()

        assert await view.delete() is False
        assert view.closed is False
        assert toasts.messages("error") == ["Failed to delete assessment: Insufficient permissions"]


class TestDetailFiles:

    @pytest.mark.asyncio
    async def test_upload_filters_and_reloads(self, admin_api, make_assessment):
        assessment = make_assessment()
        toasts = ToastCenter()
        view = AssessmentDetailView(admin_api, toasts, assessment.id)
        await view.load()

        uploaded = await view.upload_files([
            UploadItem("front.jpg", b"jpeg", "image/jpeg"),
            UploadItem("estimate.pdf", b"%PDF", "application/pdf"),
            UploadItem("setup.exe", b"MZ", "application/x-msdownload"),
        ])

        assert uploaded == 2
        assert {f["file_name"] for f in view.files} == {"front.jpg", "estimate.pdf"}
        assert "2 file(s) uploaded successfully" in toasts.messages("success")
        assert "1 file(s) skipped: unsupported type" in toasts.messages("warning")
        assert all(view.download_url(f).startswith("/files/") for f in view.files)

    @pytest.mark.asyncio
    async def test_download_all_zip(self, admin_api, make_assessment, tmp_path):
        assessment = make_assessment()
        view = AssessmentDetailView(admin_api, ToastCenter(), assessment.id)
        await view.upload_files([UploadItem("front.jpg", b"jpeg", "image/jpeg")])

        path = await view.download_all_zip(tmp_path)

        assert path.name == f"CarDamage_{assessment.id}.zip"
        assert path.read_bytes()[:2] == b"PK"

    @pytest.mark.asyncio
    async def test_zip_without_photos_toasts(self, admin_api, make_assessment, tmp_path):
        assessment = make_assessment()
        toasts = ToastCenter()
        view = AssessmentDetailView(admin_api, toasts, assessment.id)

        assert await view.download_all_zip(tmp_path) is None
        assert toasts.messages("error") == ["Failed to download photos: No photos found for this assessment"]

    @pytest.mark.asyncio
    async def test_zip_into_missing_folder_toasts(self, admin_api, make_assessment, tmp_path):
        assessment = make_assessment()
        toasts = ToastCenter()
        view = AssessmentDetailView(admin_api, toasts, assessment.id)
        await view.upload_files([UploadItem("front.jpg", b"jpeg", "image/jpeg")])

        assert await view.download_all_zip(tmp_path / "missing") is None
        assert toasts.messages("error")[0].startswith("Failed to save photos:")
        assert view.busy is False
