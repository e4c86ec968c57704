import asyncio

import pytest

from cs_agent.agents.dispatcher import DepartmentDispatcher, extract_customer_query, format_department_response
from cs_agent.domain.exceptions import DispatchError, ValidationError
from cs_agent.domain.models import ToolCallInvocation


class SettingsStub:
    langbase_sports_pipe_api_key = "sports-key-0001"
    langbase_electronics_pipe_api_key = "electronics-key-0001"
    langbase_travel_pipe_api_key = None
    department_endpoint_url = "https://api.langbase.com/beta/chat"


class FakeTransport:
    name = "fake"

    def __init__(self, response=None, error=None):
        self.calls = []
        self._response = response
        self._error = error

    async def post_department(self, url, api_key, query, thread_id, department):
        self.calls.append(
            {"url": url, "api_key": api_key, "query": query, "thread_id": thread_id, "department": department}
        )
        if self._error is not None:
            raise self._error
        return self._response


def test_format_department_response_object():
    assert format_department_response('{"status":"shipped"}') == "status shipped"


def test_format_department_response_plain_text():
    assert format_department_response("plain text") == "plain text"


def test_format_department_response_uses_first_pair_only():
    assert format_department_response('{"eta": 3, "carrier": "DHL"}') == "eta 3"


def test_format_department_response_non_object_json_verbatim():
    assert format_department_response("42") == "42"
    assert format_department_response("{}") == "{}"


def test_dispatch_known_department():
    transport = FakeTransport(response={"completion": '{"status":"shipped"}'})
    dispatcher = DepartmentDispatcher(transport, SettingsStub())
    result = asyncio.run(dispatcher.dispatch("call_sports_dept", "where is my ball?", "thread-1"))
    assert result.key == "sports"
    assert result.text == "status shipped"
    assert transport.calls == [
        {
            "url": "https://api.langbase.com/beta/chat",
            "api_key": "sports-key-0001",
            "query": "where is my ball?",
            "thread_id": "thread-1",
            "department": "sports",
        }
    ]


def test_dispatch_unknown_name_makes_no_request():
    transport = FakeTransport(response={"completion": "x"})
    dispatcher = DepartmentDispatcher(transport, SettingsStub())
    assert asyncio.run(dispatcher.dispatch("call_unknown_dept", "q", "t")) is None
    assert transport.calls == []


def test_dispatch_missing_credential():
    dispatcher = DepartmentDispatcher(FakeTransport(response={}), SettingsStub())
    with pytest.raises(ValidationError):
        asyncio.run(dispatcher.dispatch("call_travel_dept", "q", "t"))


def test_dispatch_error_propagates():
    err = DispatchError(code="DISPATCH_ERROR", message="Error: 500 Internal Server Error", http_status=500)
    dispatcher = DepartmentDispatcher(FakeTransport(error=err), SettingsStub())
    with pytest.raises(DispatchError):
        asyncio.run(dispatcher.dispatch("call_electronics_dept", "q", None))


def test_dispatch_bad_body_yields_none():
    dispatcher = DepartmentDispatcher(FakeTransport(error=ValueError("not json")), SettingsStub())
    assert asyncio.run(dispatcher.dispatch("call_sports_dept", "q", "t")) is None

    dispatcher = DepartmentDispatcher(FakeTransport(response={"answer": "x"}), SettingsStub())
    assert asyncio.run(dispatcher.dispatch("call_sports_dept", "q", "t")) is None


def test_extract_customer_query():
    parsed = ToolCallInvocation(index=0, id="c", name="call_sports_dept", arguments={"customerQuery": "status?"})
    assert extract_customer_query(parsed) == "status?"

    raw = ToolCallInvocation(index=0, id="c", name="call_sports_dept", arguments='{"customerQuery": "raw?"}')
    assert extract_customer_query(raw) == "raw?"

    broken = ToolCallInvocation(index=0, id="c", name="call_sports_dept", arguments='{"customerQuery": "br')
    assert extract_customer_query(broken) is None

    missing = ToolCallInvocation(index=0, id="c", name="call_sports_dept", arguments={"other": 1})
    assert extract_customer_query(missing) is None
