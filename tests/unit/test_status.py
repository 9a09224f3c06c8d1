from __future__ import annotations

import pytest

from netkit.status import HTTPStatusCode

####################################
#     Tests for HTTPStatusCode     #
####################################


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        (200, HTTPStatusCode.OK),
        (201, HTTPStatusCode.CREATED),
        (304, HTTPStatusCode.NOT_MODIFIED),
        (404, HTTPStatusCode.NOT_FOUND),
        (503, HTTPStatusCode.SERVICE_UNAVAILABLE),
        (-1003, HTTPStatusCode.NO_INTERNET),
    ],
)
def test_status_code_from_code(code: int, expected: HTTPStatusCode) -> None:
    """Test that known codes map to their member."""
    assert HTTPStatusCode.from_code(code) is expected


@pytest.mark.parametrize("code", [299, 418, 999, -5])
def test_status_code_from_code_unknown(code: int) -> None:
    """Test that unknown codes map to UNKNOWN_STATUS."""
    assert HTTPStatusCode.from_code(code) is HTTPStatusCode.UNKNOWN_STATUS


def test_status_code_synthetic_values() -> None:
    """Test the values of the synthetic status codes."""
    assert HTTPStatusCode.INVALID_URL == -1001
    assert HTTPStatusCode.COULD_NOT_PARSE_RESPONSE == -1002
    assert HTTPStatusCode.NO_INTERNET == -1003
    assert HTTPStatusCode.UNKNOWN_STATUS == 0


@pytest.mark.parametrize(
    "status", [HTTPStatusCode.OK, HTTPStatusCode.NO_CONTENT, HTTPStatusCode.TEMPORARY_REDIRECT]
)
def test_status_code_is_success_true(status: HTTPStatusCode) -> None:
    assert status.is_success


@pytest.mark.parametrize(
    "status",
    [
        HTTPStatusCode.CONTINUE,
        HTTPStatusCode.BAD_REQUEST,
        HTTPStatusCode.INTERNAL_SERVER_ERROR,
        HTTPStatusCode.NO_INTERNET,
        HTTPStatusCode.UNKNOWN_STATUS,
    ],
)
def test_status_code_is_success_false(status: HTTPStatusCode) -> None:
    assert not status.is_success


def test_status_code_description() -> None:
    """Test the descriptions of some status codes."""
    assert HTTPStatusCode.NO_INTERNET.description == "No internet connection to hosts."
    assert HTTPStatusCode.INVALID_URL.description == "Invalid url"
    assert HTTPStatusCode.UNKNOWN_STATUS.description == "Unknown status code"


def test_status_code_every_member_has_description() -> None:
    """Test that every member except UNKNOWN_STATUS is described."""
    for status in HTTPStatusCode:
        if status is not HTTPStatusCode.UNKNOWN_STATUS:
            assert status.description != "Unknown status code", status
