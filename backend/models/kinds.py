# models/kinds.py

from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StringConstraints

# id breaks ties between rows stamped within the same second
DEFAULT_ORDER_BY = "created_at DESC, id DESC"

RequiredText = Annotated[str, StringConstraints(min_length=1, pattern=r"\S")]

ServiceCategory = Literal[
    "home-improvement",
    "cleaning",
    "plumbing",
    "electrical",
    "painting",
    "landscaping",
    "moving",
    "handyman",
    "photography",
    "event-planning",
    "tutoring",
    "personal-training",
]


class EntityKind(BaseModel):
    """
    Typed record for one logical kind stored in the `entities` table.
    Unknown keys are kept so the JSON blob stays schema-free.
    """

    model_config = ConfigDict(extra="allow", strict=True)

    kind_name: ClassVar[str] = ""
    order_by: ClassVar[str] = DEFAULT_ORDER_BY


class ServiceData(EntityKind):
    kind_name: ClassVar[str] = "Service"

    title: RequiredText = Field(..., description="Service title")
    category: ServiceCategory = Field(..., description="Service category")
    description: str | None = Field(None, description="Service description")
    providerName: RequiredText = Field(..., description="Service provider name")
    providerRating: float | None = Field(None, ge=0, le=5, description="Provider rating (0-5)")
    reviewCount: int | None = Field(None, ge=0, description="Number of reviews")
    priceRange: RequiredText = Field(..., description="Price range (e.g., $50-$100)")
    imageUrl: str | None = Field(None, description="Service image URL")
    location: str | None = Field(None, description="Service location")
    availability: Literal["available", "busy", "unavailable"] = Field(
        "available", description="Provider availability"
    )


class BookingData(EntityKind):
    kind_name: ClassVar[str] = "Booking"

    serviceId: int = Field(..., description="Reference to service")
    serviceTitle: RequiredText = Field(..., description="Service title")
    providerName: RequiredText = Field(..., description="Provider name")
    customerName: RequiredText = Field(..., description="Customer name")
    customerEmail: EmailStr = Field(..., description="Customer email")
    customerPhone: str | None = Field(None, description="Customer phone")
    preferredDate: str | None = Field(None, description="Preferred service date")
    preferredTime: str | None = Field(None, description="Preferred service time")
    location: str | None = Field(None, description="Service location")
    details: str | None = Field(None, description="Additional details")
    status: Literal["pending", "confirmed", "completed", "cancelled"] = Field(
        "pending", description="Booking status"
    )
    totalPrice: str | None = Field(None, description="Total price estimate")


class UserData(EntityKind):
    kind_name: ClassVar[str] = "User"

    name: RequiredText = Field(..., description="User full name")
    email: EmailStr = Field(..., description="User email address")
    phone: str | None = Field(None, description="User phone number")
    userType: Literal["provider", "customer"] = Field(..., description="Type of user account")
    avatar: str | None = Field(None, description="Avatar image URL or data URI")
    # provider profile
    serviceCategories: str | None = Field(None, description="JSON array of service category IDs")
    description: str | None = Field(None, description="Provider bio/description")
    hourlyRate: float | None = Field(None, ge=0, description="Provider hourly rate")
    experience: str | None = Field(None, description="Years of experience")
    # customer profile
    preferredCategories: str | None = Field(None, description="JSON array of preferred category IDs")
    location: str | None = Field(None, description="User location/zip code")
    onboardingCompleted: str = Field("false", description="Onboarding status")


class ReviewData(EntityKind):
    kind_name: ClassVar[str] = "Review"

    bookingId: int = Field(..., description="Associated booking ID")
    serviceId: int = Field(..., description="Associated service ID")
    providerId: int = Field(..., description="Service provider user ID")
    customerId: int = Field(..., description="Customer user ID")
    rating: int = Field(..., ge=1, le=5, description="Star rating from 1-5")
    reviewText: str | None = Field(None, description="Customer review text")
    customerName: str | None = Field(None, description="Customer name for display")


KINDS: dict[str, type[EntityKind]] = {
    kind.kind_name: kind for kind in (ServiceData, BookingData, UserData, ReviewData)
}


def get_kind(entity_type: str) -> type[EntityKind] | None:
    return KINDS.get(entity_type)


def default_order_by(entity_type: str) -> str | None:
    kind = get_kind(entity_type)
    return kind.order_by if kind is not None else None


def describe_kind(kind: type[EntityKind]) -> dict[str, Any]:
    schema = kind.model_json_schema()
    return {
        "name": kind.kind_name,
        "orderBy": kind.order_by,
        "properties": schema.get("properties", {}),
        "required": schema.get("required", []),
    }
