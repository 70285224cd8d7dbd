"""Tests for the tool registry and HTTP surface."""
import asyncio
import inspect
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from slotwise.api import call_api, get_api_functions, register_api
from slotwise.api.registry import REGISTRY
from slotwise.services.http import app, invoke_api_function


@pytest.fixture
def client(api_calendar):
    return TestClient(app)


def invoke(client, name, **arguments):
    return client.post(f"/api/functions/{name}", json={"arguments": arguments})


class TestRegistry:
    """Decorator registry."""

    def test_expected_tools_are_registered(self):
        """Every calendar tool is available."""
        names = {func.name for func in get_api_functions()}
        assert {
            "list_events",
            "add_event",
            "remove_event",
            "get_event",
            "first_event_on",
            "find_slot",
            "describe_filter",
        } <= names

    def test_parameter_schema(self):
        """Schemas mark required parameters and keep simple defaults."""
        find_slot = next(func for func in get_api_functions() if func.name == "find_slot")
        schema = find_slot.parameter_schema
        assert schema["required"] == ["duration_minutes"]
        assert schema["properties"]["duration_minutes"]["type"] == "integer"
        assert schema["properties"]["strict"] == {"type": "boolean", "default": False}

    def test_duplicate_names_are_rejected(self):
        """A tool name can only be registered once."""
        with pytest.raises(ValueError):
            register_api("find_slot", description="again")(lambda: None)

    def test_unknown_tool(self):
        """Calling an unregistered tool raises KeyError."""
        with pytest.raises(KeyError):
            call_api("no_such_tool")


class TestHttp:
    """FastAPI endpoints."""

    def test_list_functions(self, client):
        """The function catalogue is served as JSON."""
        response = client.get("/api/functions")
        assert response.status_code == 200
        names = [func["name"] for func in response.json()["functions"]]
        assert "find_slot" in names

    def test_add_and_get_event(self, client):
        """Events added over HTTP can be fetched back."""
        response = invoke(client, "add_event", title="Standup", start="2025-11-13T10:00", end="2025-11-13T11:00")
        assert response.status_code == 200
        event = response.json()["result"]["event"]
        assert event["duration_minutes"] == 60
        fetched = invoke(client, "get_event", event_id=event["id"]).json()["result"]["event"]
        assert fetched["title"] == "Standup"

    def test_missing_event_is_404(self, client):
        """Unknown ids map to 404."""
        assert invoke(client, "get_event", event_id=99).status_code == 404
        assert invoke(client, "remove_event", event_id=99).status_code == 404

    def test_unknown_function_is_404(self, client):
        """Unknown function names map to 404."""
        assert invoke(client, "nope").status_code == 404

    def test_bad_arguments_are_400(self, client):
        """Invalid input maps to 400."""
        response = invoke(client, "add_event", title="a|b", start="2025-11-13T10:00", end="2025-11-13T11:00")
        assert response.status_code == 400
        assert invoke(client, "first_event_on", day="2025-02-30").status_code == 400

    def test_find_slot(self, client, api_calendar):
        """The search tool returns the slot and its end."""
        api_calendar.add_event("Standup", "", datetime(2025, 11, 13, 10), datetime(2025, 11, 13, 11))
        result = invoke(
            client,
            "find_slot",
            duration_minutes=15,
            expression="after 9:00 and spaced 30 minutes",
            start="2025-11-13T11:00",
        ).json()["result"]
        assert result["found"] is True
        assert result["start"] == "2025-11-13T11:30:00"
        assert result["end"] == "2025-11-13T11:45:00"

    def test_find_slot_and_book(self, client, api_calendar):
        """Passing a title books the slot."""
        result = invoke(
            client, "find_slot", duration_minutes=30, start="2025-11-13T10:00", title="Focus"
        ).json()["result"]
        assert result["event"]["title"] == "Focus"
        assert len(api_calendar.list_events()) == 1

    def test_find_slot_not_found(self, client):
        """No slot is a normal result, not an error."""
        result = invoke(client, "find_slot", duration_minutes=30, expression="before 2020-01-01").json()["result"]
        assert result == {"found": False, "start": None, "end": None, "filter": "before 2020-01-01", "event": None}

    def test_first_event_on(self, client, api_calendar):
        """The day index is reachable over HTTP."""
        api_calendar.add_event("Late", "", datetime(2025, 11, 13, 15), datetime(2025, 11, 13, 16))
        api_calendar.add_event("Early", "", datetime(2025, 11, 13, 8), datetime(2025, 11, 13, 9))
        result = invoke(client, "first_event_on", day="2025-11-13").json()["result"]
        assert result["event"]["title"] == "Early"
        assert invoke(client, "first_event_on", day="2025-11-14").json()["result"]["event"] is None

    def test_list_events(self, client, api_calendar):
        """Listing honours the requested range."""
        api_calendar.add_event("Standup", "", datetime(2025, 11, 13, 10), datetime(2025, 11, 13, 11))
        result = invoke(client, "list_events", start="2025-11-13T00:00", end="2025-11-14T00:00").json()["result"]
        assert [event["title"] for event in result["events"]] == ["Standup"]

    def test_describe_filter(self, client):
        """Filter trees are rendered as nested nodes."""
        tree = invoke(client, "describe_filter", expression="not on sunday").json()["result"]["tree"]
        assert tree == {
            "kind": "not",
            "value": None,
            "children": [{"kind": "day_of_week", "value": 0, "children": []}],
        }

    def test_describe_filter_strict(self, client):
        """Strict syntax errors map to 400."""
        assert invoke(client, "describe_filter", expression="sometimes", strict=True).status_code == 400


class TestSerializedCalls:
    """Tool calls share one calendar and run one at a time on the event loop."""

    @pytest.fixture
    def loop_tool(self):
        """Temporary tool reporting whether it runs inside the server's event loop."""

        @register_api("running_on_event_loop", description="Report the calling context.", category="test")
        def running_on_event_loop() -> dict:
            asyncio.get_running_loop()
            return {"on_loop": True}

        yield
        REGISTRY.pop("running_on_event_loop", None)

    def test_invoke_is_a_coroutine(self):
        """The invoke route is async, so FastAPI does not hand it to the thread pool."""
        assert inspect.iscoroutinefunction(invoke_api_function)

    def test_tools_run_on_the_event_loop(self, client, loop_tool):
        """Tools execute on the loop thread rather than a worker thread."""
        response = invoke(client, "running_on_event_loop")
        assert response.status_code == 200
        assert response.json()["result"] == {"on_loop": True}

    def test_interleaved_adds_and_removes_keep_the_index(self, client, api_calendar):
        """Back-to-back mutations leave the first event of the day correct."""
        ids = []
        for hour in (15, 8, 12):
            result = invoke(
                client, "add_event", title=f"at {hour}", start=f"2025-11-13T{hour:02d}:00", end=f"2025-11-13T{hour:02d}:30"
            ).json()["result"]
            ids.append(result["event"]["id"])
        assert invoke(client, "remove_event", event_id=ids[1]).status_code == 200
        first = invoke(client, "first_event_on", day="2025-11-13").json()["result"]["event"]
        assert first["title"] == "at 12"
