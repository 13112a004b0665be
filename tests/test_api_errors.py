from __future__ import annotations

from app.api.errors import ApiError, ApiErrorCode, first_error_message, to_error_payload


def test_to_error_payload_preserves_structured_detail() -> None:
    payload = to_error_payload(
        {"error_code": "AUTH_TOKEN_INVALID", "message": "Invalid"},
        401,
    )

    assert payload == {"error_code": "AUTH_TOKEN_INVALID", "message": "Invalid"}


def test_to_error_payload_normalizes_plain_string() -> None:
    payload = to_error_payload("boom", 500)

    assert payload == {"error_code": "HTTP_500", "message": "boom"}


def test_first_error_message_strips_value_error_prefix() -> None:
    message = first_error_message(
        [{"loc": ("body", "email"), "msg": "Value error, Please enter a valid email address!"}]
    )

    assert message == "Please enter a valid email address!"


def test_first_error_message_prefixes_location_for_type_errors() -> None:
    message = first_error_message([{"loc": ("body", "price"), "msg": "Field required"}])

    assert message == "price: Field required"


def test_first_error_message_defaults_when_empty() -> None:
    assert first_error_message([]) == "Invalid request payload!"


def test_api_error_carries_envelope_and_headers() -> None:
    exc = ApiError(
        status_code=404,
        error_code=ApiErrorCode.RESOURCE_NOT_FOUND,
        message="Offer not found!",
        headers={"set-cookie": "x"},
    )

    assert to_error_payload(exc.detail, exc.status_code) == {
        "error_code": "RESOURCE_NOT_FOUND",
        "message": "Offer not found!",
    }
    assert exc.headers == {"set-cookie": "x"}
