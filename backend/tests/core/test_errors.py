"""Error Hierarchy — tests for the REST error envelope and HTTP status mapping."""

from skillsharp.core.errors import (
    AccountBlockedError, ConflictError, CsvImportError, DatabaseError,
    ErrorCategory, PremiumRequiredError, ResourceNotFoundError, SessionSupersededError,
)


def test_to_response_envelope():
    body = ResourceNotFoundError("Exam", "abc").to_response()["error"]
    assert body["code"] == "RESOURCE_NOT_FOUND"
    assert body["category"] == ErrorCategory.RESOURCE_NOT_FOUND.value
    assert "abc" in body["message"]
    assert "details" not in body


def test_csv_error_carries_row_details():
    err = CsvImportError("bad", [{"line": 2, "message": "missing"}])
    assert err.http_status == 400
    assert err.to_response()["error"]["details"] == [{"line": 2, "message": "missing"}]


def test_status_codes():
    assert SessionSupersededError().http_status == 401
    assert AccountBlockedError().http_status == 403
    assert PremiumRequiredError().http_status == 402
    assert ConflictError("dup", "DUP").http_status == 409
    assert DatabaseError("x", "commit").http_status == 503
