"""
Tests for the WIP window API routes.
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

from fastapi.testclient import TestClient

from factories import make_user, make_window, session_for, sign_in
from main import app


class TestWipWindowRoutes:
    """Test WIP window listing, creation, update and deletion."""

    def setup_method(self):
        """Set up test client and a signed-in user."""
        self.client = TestClient(app)
        sign_in(session_for(make_user()))

    def test_requires_session(self):
        app.dependency_overrides.clear()
        response = self.client.get("/api/wip-windows/")
        assert response.status_code == 401

    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.list_windows_with_stats', new_callable=AsyncMock)
    def test_list_windows_with_counts(self, mock_list):
        window = make_window()
        mock_list.return_value = [(window, 3, 5)]

        response = self.client.get("/api/wip-windows/")

        assert response.status_code == 200
        data = response.json()
        assert len(data["wip_windows"]) == 1
        assert data["wip_windows"][0]["id"] == str(window.id)
        assert data["wip_windows"][0]["event_count"] == 3
        assert data["wip_windows"][0]["participant_count"] == 5

    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.create_window', new_callable=AsyncMock)
    def test_create_active_window(self, mock_create):
        window = make_window(name="April WIP")
        mock_create.return_value = window

        response = self.client.post("/api/wip-windows/", json={
            "name": "April WIP",
            "start_date": "2025-04-01T00:00:00Z",
            "end_date": "2025-04-08T00:00:00Z",
            "is_active": True,
        })

        assert response.status_code == 201
        assert response.json()["name"] == "April WIP"
        assert mock_create.await_args.kwargs["is_active"] is True

    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.create_window', new_callable=AsyncMock)
    def test_create_rejects_end_before_start(self, mock_create):
        response = self.client.post("/api/wip-windows/", json={
            "name": "Backwards",
            "start_date": "2025-04-08T00:00:00Z",
            "end_date": "2025-04-01T00:00:00Z",
        })

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid data"
        mock_create.assert_not_awaited()

    def test_create_rejects_missing_name(self):
        response = self.client.post("/api/wip-windows/", json={
            "start_date": "2025-04-01T00:00:00Z",
            "end_date": "2025-04-08T00:00:00Z",
        })

        assert response.status_code == 400
        fields = [error["field"] for error in response.json()["errors"]]
        assert "name" in fields

    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.get_window', new_callable=AsyncMock)
    def test_update_missing_window(self, mock_get):
        mock_get.return_value = None

        response = self.client.patch(f"/api/wip-windows/{uuid4()}", json={"name": "Renamed"})

        assert response.status_code == 404

    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.update_window', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.get_window', new_callable=AsyncMock)
    def test_update_activates_window(self, mock_get, mock_update):
        window = make_window(is_active=False)
        mock_get.return_value = window
        mock_update.return_value = make_window(window_id=window.id, is_active=True)

        response = self.client.patch(f"/api/wip-windows/{window.id}", json={"is_active": True})

        assert response.status_code == 200
        assert response.json()["is_active"] is True
        assert mock_update.await_args.args[1] == {"is_active": True}

    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.delete_window', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.count_events', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.get_window', new_callable=AsyncMock)
    def test_delete_with_events_needs_force(self, mock_get, mock_count, mock_delete):
        window = make_window(is_active=False)
        mock_get.return_value = window
        mock_count.return_value = 2

        response = self.client.delete(f"/api/wip-windows/{window.id}")

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["event_count"] == 2
        assert detail["can_force_delete"] is True
        mock_delete.assert_not_awaited()

    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.delete_window', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.count_events', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.get_window', new_callable=AsyncMock)
    def test_force_delete_inactive_window(self, mock_get, mock_count, mock_delete):
        window = make_window(is_active=False)
        mock_get.return_value = window
        mock_count.return_value = 2
        mock_delete.return_value = True

        response = self.client.delete(f"/api/wip-windows/{window.id}?force=true")

        assert response.status_code == 200
        assert response.json()["success"] is True
        mock_delete.assert_awaited_once_with(window.id)

    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.delete_window', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.count_events', new_callable=AsyncMock)
    @patch('wip_planner.services.database_manager.operations.WipWindowOperations.get_window', new_callable=AsyncMock)
    def test_active_window_cannot_be_deleted(self, mock_get, mock_count, mock_delete):
        window = make_window(is_active=True)
        mock_get.return_value = window
        mock_count.return_value = 0

        response = self.client.delete(f"/api/wip-windows/{window.id}?force=true")

        assert response.status_code == 400
        assert "active" in response.json()["detail"]
        mock_delete.assert_not_awaited()


def test_healthz():
    response = TestClient(app).get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
