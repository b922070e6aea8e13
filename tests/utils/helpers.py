"""
Test helper functions for common testing operations

These helpers provide utilities for response validation and for checking
that secrets never leak into responses or logs.
"""

from http.cookies import SimpleCookie
from typing import Any, Dict, Optional, Union


def assert_response_structure(response_data: Dict[str, Any], expected_keys: list[str], optional_keys: Optional[list[str]] = None):
    """Assert that response has expected structure"""
    optional_keys = optional_keys or []

    # Check required keys are present
    for key in expected_keys:
        assert key in response_data, f"Required key '{key}' missing from response"

    # Check no unexpected keys (except optional ones)
    allowed_keys = set(expected_keys + optional_keys)
    unexpected_keys = set(response_data.keys()) - allowed_keys

    assert not unexpected_keys, f"Unexpected keys in response: {unexpected_keys}"


def assert_no_sensitive_data_in_logs(caplog, sensitive_patterns: list[str]):
    """Assert that sensitive data patterns don't appear in logs"""
    all_logs = " ".join(record.getMessage() for record in caplog.records)
    all_logs += " ".join(str(record.__dict__) for record in caplog.records)

    for pattern in sensitive_patterns:
        assert pattern not in all_logs, f"Sensitive pattern '{pattern}' found in logs"


def assert_no_sensitive_data_in_response(response_data: Union[Dict, list, str], sensitive_patterns: list[str]):
    """Assert that sensitive data patterns don't appear in API responses"""
    response_text = str(response_data)

    for pattern in sensitive_patterns:
        assert pattern not in response_text, f"Sensitive pattern '{pattern}' found in response"


def parse_set_cookie(header_value: str) -> Dict[str, str]:
    """Attributes of a Set-Cookie header, keys lower-cased"""
    cookie = SimpleCookie()
    cookie.load(header_value)
    morsel = next(iter(cookie.values()))
    attributes = {key.lower(): str(value) for key, value in morsel.items() if value}
    attributes["name"] = morsel.key
    attributes["value"] = morsel.value
    return attributes


def error_fields(response_data: Dict[str, Any]) -> list[str]:
    """Field names from a 400 validation error body"""
    return [error["field"] for error in response_data.get("errors", [])]
