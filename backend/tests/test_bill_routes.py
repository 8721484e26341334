"""
Tests for bill upload, deletion and the bill download.
"""

import base64
import io
import zipfile
from unittest.mock import AsyncMock, patch
from uuid import uuid4

from fastapi.testclient import TestClient

from factories import add_attendance, add_bill, make_event, make_user, session_for, sign_in
from main import app
from wip_planner.apis.routes.bill_routes import get_receipt_storage
from wip_planner.models import AttendanceStatus
from wip_planner.services.receipts import ReceiptStorage
from wip_planner.services.reports import build_bills_zip

PNG_DATA_URL = "data:image/png;base64,aGVsbG8="


class TestCreateBill:
    """Test POST /events/{id}/bills."""

    def setup_method(self):
        self.client = TestClient(app)
        self.creator = make_user("creator", "Chandra")
        self.guest = make_user("guest", "Gita")
        self.event = make_event(self.creator)
        add_attendance(self.event, self.guest, status=AttendanceStatus.PROPOSED)
        app.dependency_overrides[get_receipt_storage] = lambda: ReceiptStorage()

    @patch('wip_planner.services.database_manager.operations.BillOperations.create_bill', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.UserOperations.ensure_user', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.EventOperations.get_event', new_callable=AsyncMock)
    def test_attendee_uploads_bill(self, mock_event, mock_ensure, mock_create):
        sign_in(session_for(self.guest))
        mock_event.return_value = self.event
        mock_ensure.return_value = self.guest
        mock_create.return_value = add_bill(
            self.event, self.guest, 1300, tax_cents=100, tip_cents=200,
            attachments=[{"file_name": "dinner.png", "url": PNG_DATA_URL}],
        )

        response = self.client.post(f"/api/events/{self.event.id}/bills", json={
            "subtotal_cents": 1000,
            "tax_cents": 100,
            "tip_cents": 200,
            "files": [{"name": "dinner.png", "url": PNG_DATA_URL, "size": 5}],
        })

        assert response.status_code == 201
        assert response.json()["total_cents"] == 1300
        kwargs = mock_create.await_args.kwargs
        assert kwargs["payer_id"] == "guest"
        assert kwargs["amounts"] == {"subtotal_cents": 1000, "tax_cents": 100, "tip_cents": 200, "total_cents": 1300}
        assert kwargs["notes"] == "Receipt uploaded"
        assert kwargs["attachments"][0]["mime_type"] == "image/png"
        assert kwargs["attachments"][0]["url"] == PNG_DATA_URL
        assert kwargs["attachments"][0]["size_bytes"] == 5

    @patch('wip_planner.services.database_manager.operations.BillOperations.create_bill', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.UserOperations.ensure_user', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.EventOperations.get_event', new_callable=AsyncMock)
    def test_subtotal_defaults_to_item_sum(self, mock_event, mock_ensure, mock_create):
        sign_in(session_for(self.creator))
        mock_event.return_value = self.event
        mock_ensure.return_value = self.creator
        mock_create.return_value = add_bill(self.event, self.creator, 1250)

        response = self.client.post(f"/api/events/{self.event.id}/bills", json={
            "notes": "Snacks",
            "tax_cents": 50,
            "items": [
                {"label": "Chips", "amount_cents": 300, "quantity": 2},
                {"label": "Juice", "amount_cents": 600},
            ],
            "files": [{"name": "snacks.pdf", "url": "https://files.example.com/snacks.pdf", "size": 2048}],
        })

        assert response.status_code == 201
        kwargs = mock_create.await_args.kwargs
        assert kwargs["amounts"]["subtotal_cents"] == 1200
        assert kwargs["amounts"]["total_cents"] == 1250
        assert kwargs["notes"] == "Snacks"
        assert kwargs["attachments"][0]["mime_type"] == "application/pdf"

    @patch('wip_planner.services.database_manager.operations.EventOperations.get_event', new_callable=AsyncMock)
    def test_stranger_cannot_upload(self, mock_event):
        sign_in(session_for(make_user("stranger", "Sam")))
        mock_event.return_value = self.event

        response = self.client.post(f"/api/events/{self.event.id}/bills", json={
            "subtotal_cents": 100,
            "files": [{"name": "r.png", "url": PNG_DATA_URL, "size": 5}],
        })

        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied"

    @patch('wip_planner.services.database_manager.operations.EventOperations.get_event', new_callable=AsyncMock)
    def test_rejects_large_and_unsupported_files(self, mock_event):
        sign_in(session_for(self.creator))
        mock_event.return_value = self.event

        too_large = self.client.post(f"/api/events/{self.event.id}/bills", json={
            "subtotal_cents": 100,
            "files": [{"name": "huge.png", "url": PNG_DATA_URL, "size": 11 * 1024 * 1024}],
        })
        wrong_type = self.client.post(f"/api/events/{self.event.id}/bills", json={
            "subtotal_cents": 100,
            "files": [{"name": "notes.txt", "url": "data:text/plain;base64,aGk=", "size": 2}],
        })

        assert too_large.status_code == 400
        assert "too large" in too_large.json()["detail"]
        assert wrong_type.status_code == 400
        assert "Only JPG, PNG, and PDF" in wrong_type.json()["detail"]

    @patch('wip_planner.services.database_manager.operations.BillOperations.create_bill', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.EventOperations.get_event', new_callable=AsyncMock)
    def test_size_is_measured_from_payload(self, mock_event, mock_create):
        sign_in(session_for(self.creator))
        mock_event.return_value = self.event
        payload = base64.b64encode(b"\0" * (10 * 1024 * 1024 + 1)).decode()

        response = self.client.post(f"/api/events/{self.event.id}/bills", json={
            "subtotal_cents": 100,
            "files": [{"name": "huge.png", "url": f"data:image/png;base64,{payload}", "size": 10}],
        })

        assert response.status_code == 400
        assert "too large" in response.json()["detail"]
        mock_create.assert_not_awaited()

    def test_bill_needs_a_receipt(self):
        sign_in(session_for(self.creator))
        response = self.client.post(f"/api/events/{self.event.id}/bills", json={"subtotal_cents": 100, "files": []})
        assert response.status_code == 400


class TestDeleteBill:
    """Test DELETE /events/{id}/bills/{bill_id}."""

    def setup_method(self):
        self.client = TestClient(app)
        self.creator = make_user("creator", "Chandra")
        self.payer = make_user("payer", "Priya")
        self.event = make_event(self.creator)
        add_attendance(self.event, self.payer)
        self.bill = add_bill(self.event, self.payer, 900)
        app.dependency_overrides[get_receipt_storage] = lambda: ReceiptStorage()

    @patch('wip_planner.services.database_manager.operations.BillOperations.get_bill', new_callable=AsyncMock)
    def test_missing_bill(self, mock_bill):
        sign_in(session_for(self.creator))
        mock_bill.return_value = None

        response = self.client.delete(f"/api/events/{self.event.id}/bills/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["detail"] == "Receipt not found"

    @patch('wip_planner.services.database_manager.operations.BillOperations.get_bill', new_callable=AsyncMock)
    def test_bill_of_another_event(self, mock_bill):
        sign_in(session_for(self.creator))
        mock_bill.return_value = self.bill

        response = self.client.delete(f"/api/events/{uuid4()}/bills/{self.bill.id}")

        assert response.status_code == 404
        assert response.json()["detail"] == "Receipt not found in this event"

    @patch('wip_planner.services.database_manager.operations.BillOperations.delete_bill', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.EventOperations.get_event', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.BillOperations.get_bill', new_callable=AsyncMock)
    def test_payer_and_creator_may_delete(self, mock_bill, mock_event, mock_delete):
        mock_bill.return_value = self.bill
        mock_event.return_value = self.event
        mock_delete.return_value = True

        sign_in(session_for(self.payer))
        by_payer = self.client.delete(f"/api/events/{self.event.id}/bills/{self.bill.id}")
        sign_in(session_for(self.creator))
        by_creator = self.client.delete(f"/api/events/{self.event.id}/bills/{self.bill.id}")
        sign_in(session_for(make_user("other", "Omar")))
        by_other = self.client.delete(f"/api/events/{self.event.id}/bills/{self.bill.id}")

        assert by_payer.status_code == 200
        assert by_creator.status_code == 200
        assert by_other.status_code == 403
        assert mock_delete.await_count == 2


class TestDownloadBills:
    """Test GET /events/{id}/download-bills."""

    def setup_method(self):
        self.client = TestClient(app)
        self.creator = make_user("creator", "Chandra")
        self.event = make_event(self.creator, title="Team dinner: March")
        add_attendance(self.event, self.creator)
        add_bill(self.event, self.creator, 1000, attachments=[
            {"file_name": "dinner.png", "url": PNG_DATA_URL},
            {"file_name": "cab.pdf", "url": "https://files.example.com/cab.pdf", "size_bytes": 4096},
        ])
        app.dependency_overrides[get_receipt_storage] = lambda: ReceiptStorage()

    @patch('wip_planner.services.database_manager.operations.EventOperations.get_event', new_callable=AsyncMock)
    def test_creator_downloads_zip(self, mock_event):
        sign_in(session_for(self.creator))
        mock_event.return_value = self.event

        response = self.client.get(f"/api/events/{self.event.id}/download-bills")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/zip"
        assert 'filename="Team_dinner__March_Bills.zip"' in response.headers["content-disposition"]
        archive = zipfile.ZipFile(io.BytesIO(response.content))
        names = archive.namelist()
        assert "Team dinner: March - Bill Summary.txt" in names
        assert archive.read("receipts/dinner.png") == b"hello"
        assert "receipts/cab.pdf.info.txt" in names

    @patch('wip_planner.services.database_manager.operations.EventOperations.get_event', new_callable=AsyncMock)
    def test_proposed_attendee_cannot_download(self, mock_event):
        guest = make_user("guest", "Gita")
        add_attendance(self.event, guest, status=AttendanceStatus.PROPOSED)
        sign_in(session_for(guest))
        mock_event.return_value = self.event

        response = self.client.get(f"/api/events/{self.event.id}/download-bills")

        assert response.status_code == 403

    @patch('wip_planner.apis.routes.bill_routes.run_in_threadpool', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.EventOperations.get_event', new_callable=AsyncMock)
    def test_archive_is_built_off_the_event_loop(self, mock_event, mock_threadpool):
        sign_in(session_for(self.creator))
        mock_event.return_value = self.event
        mock_threadpool.side_effect = lambda func, *args: func(*args)

        response = self.client.get(f"/api/events/{self.event.id}/download-bills")

        assert response.status_code == 200
        func, event, _ = mock_threadpool.await_args.args
        assert func is build_bills_zip
        assert event is self.event


class TestReceiptStorageDependency:

    def setup_method(self):
        get_receipt_storage.cache_clear()

    def teardown_method(self):
        get_receipt_storage.cache_clear()

    def test_storage_is_built_once(self):
        with patch.object(ReceiptStorage, "from_settings", return_value=ReceiptStorage()) as mock_from_settings:
            first = get_receipt_storage()
            second = get_receipt_storage()

        assert first is second
        mock_from_settings.assert_called_once_with()

    @patch('wip_planner.services.database_manager.operations.BillOperations.create_bill', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.UserOperations.ensure_user', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.EventOperations.get_event', new_callable=AsyncMock)
    def test_upload_stores_receipts_in_threadpool(self, mock_event, mock_ensure, mock_create):
        creator = make_user("creator", "Chandra")
        event = make_event(creator)
        storage = ReceiptStorage()
        app.dependency_overrides[get_receipt_storage] = lambda: storage
        sign_in(session_for(creator))
        mock_event.return_value = event
        mock_ensure.return_value = creator
        mock_create.return_value = add_bill(event, creator, 100)

        with patch('wip_planner.apis.routes.bill_routes.run_in_threadpool', new_callable=AsyncMock) as mock_threadpool:
            mock_threadpool.side_effect = lambda func, *args: func(*args)
            response = TestClient(app).post(f"/api/events/{event.id}/bills", json={
                "subtotal_cents": 100,
                "files": [{"name": "r.png", "url": PNG_DATA_URL, "size": 5}],
            })

        assert response.status_code == 201
        func, event_id, file_name, url, mime_type = mock_threadpool.await_args.args
        assert func == storage.store
        assert (event_id, file_name, url, mime_type) == (str(event.id), "r.png", PNG_DATA_URL, "image/png")
