"""Tests for saving designs to the project API."""

import json

import httpx
import pytest

from appforge.services.projects import SAVE_PROJECT_PATH, ProjectClient, save_project


def make_client(handler) -> ProjectClient:
    return ProjectClient("http://projects.test/", transport=httpx.MockTransport(handler))


@pytest.mark.unit
@pytest.mark.asyncio
class TestSaveProject:
    """Test save_project against a mocked project API."""

    async def test_success_records_project_id(self, store, complete_state):
        store.load(complete_state.model_dump(by_alias=True))
        received = {}

        def handler(request: httpx.Request) -> httpx.Response:
            received["url"] = str(request.url)
            received["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "project": {"id": "p-123"}})

        result = await save_project(store, make_client(handler), generated_at="2026-04-01")

        assert result.success is True
        assert result.project_id == "p-123"
        assert store.get().project_id == "p-123"
        assert received["url"] == f"http://projects.test{SAVE_PROJECT_PATH}"

        body = received["body"]
        assert set(body) == {"projectId", "wizardData", "prd", "tickets"}
        assert body["projectId"] is None
        assert body["wizardData"]["step1"]["appName"] == "Trail Mix"
        assert body["prd"].startswith("# Trail Mix - Product Requirements Document")
        assert body["tickets"][0]["key"] == "TRAI-1"
        assert body["tickets"][0]["createdAt"] == "2026-04-01"

    async def test_http_error_leaves_state_untouched(self, store, complete_state):
        store.load(complete_state.model_dump(by_alias=True))
        before = store.get().model_dump()

        def handler(request):
            return httpx.Response(500, json={"success": False, "error": "db down"})

        result = await save_project(store, make_client(handler))

        assert result.success is False
        assert result.error
        assert store.get().model_dump() == before

    async def test_rejected_save(self, store):
        def handler(request):
            return httpx.Response(200, json={"success": False, "error": "projects table missing"})

        result = await save_project(store, make_client(handler))

        assert result.success is False
        assert result.error == "projects table missing"
        assert store.get().project_id is None

    async def test_network_error(self, store):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = await save_project(store, make_client(handler))

        assert result.success is False
        assert "connection refused" in result.error

    async def test_non_json_response(self, store):
        def handler(request):
            return httpx.Response(200, text="<html>oops</html>")

        result = await save_project(store, make_client(handler))
        assert result.success is False
        assert store.get().project_id is None

    async def test_reset_during_save_is_respected(self, store):
        def handler(request):
            store.reset()
            return httpx.Response(200, json={"success": True, "project": {"id": "p-9"}})

        result = await save_project(store, make_client(handler))

        assert result.success is True
        assert store.get().project_id is None
