import pydantic
import pytest

from cs_agent.config.settings import Settings
from cs_agent.providers.registry import DEPARTMENT_REGISTRY, get_department


def test_settings_defaults():
    s = Settings(_env_file=None)
    assert s.main_endpoint_url == "https://api.langbase.com/beta/chat"
    assert s.department_endpoint_url == s.main_endpoint_url
    assert s.thread_id_header == "lb-thread-id"
    assert s.follow_up_query == "summarize the current status for the customer"
    assert s.max_follow_up_rounds == 1
    assert s.http_timeout is None


def test_settings_rejects_short_api_key():
    with pytest.raises(pydantic.ValidationError):
        Settings(_env_file=None, langbase_sports_pipe_api_key="short")


def test_credential_status_hides_values():
    s = Settings(
        _env_file=None,
        langbase_online_store_customer_service_api_key="main-key-0001",
        langbase_sports_pipe_api_key=None,
        langbase_electronics_pipe_api_key=None,
        langbase_travel_pipe_api_key=None,
    )
    status = s.credential_status()
    assert status["LANGBASE_ONLINE_STORE_CUSTOMER_SERVICE_API_KEY"] is True
    assert status["LANGBASE_SPORTS_PIPE_API_KEY"] is False
    assert "main-key-0001" not in repr(status)


def test_department_registry():
    assert set(DEPARTMENT_REGISTRY) == {"call_sports_dept", "call_electronics_dept", "call_travel_dept"}
    assert get_department("call_electronics_dept").key == "electronics"
    assert get_department("CALL_SPORTS_DEPT") is None
    for dept in DEPARTMENT_REGISTRY.values():
        assert dept.credential_field in Settings.model_fields
