import pytest

from core.errors import ValidationError
from models.kinds import KINDS, ServiceData, default_order_by, describe_kind
from services.validation import validate_payload, validator_for


def test_known_kinds():
    assert set(KINDS) == {"Service", "Booking", "User", "Review"}
    assert default_order_by("Booking") == "created_at DESC, id DESC"
    assert default_order_by("Note") is None


def test_service_defaults_injected_and_unsent_fields_omitted(service_data):
    cleaned = validate_payload(ServiceData, service_data)

    assert cleaned == {**service_data, "availability": "available"}


def test_extra_fields_are_kept(service_data):
    cleaned = validator_for("Service")({**service_data, "badge": "top-rated"})

    assert cleaned["badge"] == "top-rated"


def test_missing_required_fields_are_reported():
    with pytest.raises(ValidationError) as excinfo:
        validator_for("Service")({"title": "Gutter cleaning"})

    joined = " ".join(excinfo.value.errors)
    assert "category" in joined
    assert "providerName" in joined
    assert "priceRange" in joined


def test_blank_required_text_is_rejected(service_data):
    with pytest.raises(ValidationError):
        validator_for("Service")({**service_data, "title": "   "})


def test_enum_is_enforced(service_data):
    with pytest.raises(ValidationError):
        validator_for("Service")({**service_data, "availability": "on vacation"})


def test_booking_status_default_and_email(booking_data):
    cleaned = validator_for("Booking")(booking_data)

    assert cleaned["status"] == "pending"
    with pytest.raises(ValidationError):
        validator_for("Booking")({**booking_data, "customerEmail": "not-an-email"})


def test_review_rating_bounds():
    review = {"bookingId": 1, "serviceId": 2, "providerId": 3, "customerId": 4, "rating": 5}

    assert validator_for("Review")(review)["rating"] == 5
    with pytest.raises(ValidationError):
        validator_for("Review")({**review, "rating": 6})


def test_user_onboarding_default():
    cleaned = validator_for("User")(
        {"name": "Dana Reyes", "email": "dana@gmail.com", "userType": "provider"}
    )

    assert cleaned["onboardingCompleted"] == "false"


def test_unknown_kind_has_no_validator():
    assert validator_for("Note") is None


def test_describe_kind_lists_required_fields():
    descriptor = describe_kind(ServiceData)

    assert descriptor["name"] == "Service"
    assert descriptor["orderBy"] == "created_at DESC, id DESC"
    assert set(descriptor["required"]) == {"title", "category", "providerName", "priceRange"}
    assert "cleaning" in descriptor["properties"]["category"]["enum"]


def test_mismatched_types_are_rejected_not_coerced():
    review = {"bookingId": 1, "serviceId": 2, "providerId": 3, "customerId": 4, "rating": 5}

    with pytest.raises(ValidationError) as excinfo:
        validator_for("Review")({**review, "bookingId": "1"})
    assert any("bookingId" in e for e in excinfo.value.errors)

    with pytest.raises(ValidationError):
        validator_for("Review")({**review, "rating": True})
    with pytest.raises(ValidationError):
        validator_for("Review")({**review, "rating": "5"})


def test_payload_values_are_stored_as_sent(booking_data):
    sent = {**booking_data, "customerEmail": "Jane@Example.COM"}

    cleaned = validator_for("Booking")(sent)

    assert cleaned == {**sent, "status": "pending"}
