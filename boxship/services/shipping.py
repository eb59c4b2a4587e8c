# ==== SHIPPING ENGINE ==== #

"""
Shipping cost and box validation engine.

This module validates box submissions, computes shipping costs from the
pricing table, formats amounts for display and builds the payload handed
to the box store. Every function is pure apart from tracing and metrics;
no state is kept between calls.
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional

from babel.numbers import format_currency as babel_format_currency

from boxship.business.errors import MalformedColor
from boxship.business.countries import (
    CountryCode,
    DestinationCountry,
    get_country,
    display_name,
    lookup,
)
from boxship.observability.metrics import validation_failures_total
from boxship.observability.tracing import get_tracer
from boxship.services.colors import (
    CHANNEL_MAX,
    CHANNEL_MIN,
    from_storage_string,
    rgb_to_hex,
)
from boxship.settings import settings


tracer = get_tracer(__name__)


# ==== VALIDATION MESSAGES ==== #

RECEIVER_NAME_REQUIRED = "Receiver name is required"
WEIGHT_NEGATIVE = "Weight cannot be negative"
WEIGHT_NOT_POSITIVE = "Weight must be greater than 0"
WEIGHT_NOT_A_NUMBER = "Weight must be a valid number"
WEIGHT_TOO_LARGE = "Weight is too large to price"
BOX_COLOR_REQUIRED = "Box color is required"
BOX_COLOR_MALFORMED = "Box color must be in r,g,b format"
BOX_COLOR_OUT_OF_RANGE = "Box color channels must be between 0 and 255"
DESTINATION_REQUIRED = "Destination country is required"
DESTINATION_UNKNOWN = "Unknown destination country: {code}"


# ==== DATA STRUCTURES ==== #


@dataclass(frozen=True)
class BoxSubmission:
    """
    Raw box form data as entered by the user.

    Nothing is trimmed or checked here; see :func:`validate`.
    """

    receiver_name: str = ""
    weight: float = 0.0
    box_color: str = ""
    destination_country: CountryCode = ""

    @classmethod
    def from_form(cls, data: Mapping[str, Any]) -> "BoxSubmission":
        """
        Build a submission from loosely typed form fields.

        Missing or blank weights become 0 like an untouched form field;
        text that is not a number becomes NaN and fails validation. Other
        fields of the wrong type are turned into text and fail their own
        rules.
        """
        destination = data.get("destination_country") or ""
        if not isinstance(destination, str):
            destination = str(destination)

        return cls(
            receiver_name=str(data.get("receiver_name") or ""),
            weight=_parse_weight(data.get("weight")),
            box_color=str(data.get("box_color") or ""),
            destination_country=destination,
        )


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of one validation pass.

    ``weight`` is the value the caller keeps in its form state: a negative
    submission is reset to 0.
    """

    errors: Dict[str, str] = field(default_factory=dict)
    weight: float = 0.0

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class BoxPayload:
    """Box record to insert; id and created_at are assigned by the store."""

    receiver_name: str
    weight: float
    box_color: str
    destination_country: str
    shipping_cost: float

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ShippingQuote:
    destination_country: str
    country_name: str
    weight: float
    multiplier: float
    shipping_cost: float
    shipping_cost_display: str


@dataclass(frozen=True)
class BoxSummary:
    count: int
    total_cost: float
    total_cost_display: str


# ==== VALIDATION ==== #


def _parse_weight(raw: Any) -> float:
    if raw is None or isinstance(raw, bool):
        return 0.0
    if isinstance(raw, str) and not raw.strip():
        return 0.0
    try:
        return float(raw)
    except (TypeError, ValueError):
        return math.nan


def validate(submission: BoxSubmission) -> ValidationResult:
    """
    Check every field of a submission.

    All rules run independently so the caller can show every problem at
    once.

    Args:
        submission (BoxSubmission): Raw form data

    Returns:
        ValidationResult: Field to message mapping, empty when valid
    """
    errors: Dict[str, str] = {}

    # --► RECEIVER NAME
    if not (submission.receiver_name or "").strip():
        errors["receiver_name"] = RECEIVER_NAME_REQUIRED

    # --► WEIGHT
    weight = submission.weight
    if not isinstance(weight, (int, float)) or isinstance(weight, bool) or not math.isfinite(weight):
        errors["weight"] = WEIGHT_NOT_A_NUMBER
    elif weight < 0:
        errors["weight"] = WEIGHT_NEGATIVE
        weight = 0.0
    elif weight == 0:
        errors["weight"] = WEIGHT_NOT_POSITIVE
    else:
        option = lookup(submission.destination_country)
        if option is not None and not math.isfinite(weight * option.multiplier):
            errors["weight"] = WEIGHT_TOO_LARGE

    # --► BOX COLOR
    if not submission.box_color:
        errors["box_color"] = BOX_COLOR_REQUIRED
    else:
        try:
            color = from_storage_string(submission.box_color)
        except MalformedColor:
            errors["box_color"] = BOX_COLOR_MALFORMED
        else:
            if any(not CHANNEL_MIN <= channel <= CHANNEL_MAX for channel in color):
                errors["box_color"] = BOX_COLOR_OUT_OF_RANGE

    # --► DESTINATION
    destination = submission.destination_country
    if not destination:
        errors["destination_country"] = DESTINATION_REQUIRED
    elif lookup(destination) is None:
        errors["destination_country"] = DESTINATION_UNKNOWN.format(code=destination)

    for field_name in errors:
        validation_failures_total.labels(field=field_name).inc()

    return ValidationResult(errors=errors, weight=weight)


# ==== COST COMPUTATION ==== #


def compute_cost(weight: float, destination_country: CountryCode) -> float:
    """
    Compute the shipping cost of a box.

    The result is ``weight * multiplier`` without rounding; rounding only
    happens in :func:`format_currency`.

    Raises:
        UnknownDestination: If the destination is not in the pricing table
    """
    with tracer.start_as_current_span("compute_shipping_cost") as span:
        option = get_country(destination_country)
        cost = weight * option.multiplier

        span.set_attribute("destination_country", option.code.value)
        span.set_attribute("weight", float(weight))
        span.set_attribute("shipping_cost", float(cost))
        return cost


def quote(weight: float, destination_country: CountryCode) -> ShippingQuote:
    """Estimate the cost shown next to the form before saving."""
    option = get_country(destination_country)
    cost = compute_cost(weight, option.code)
    return ShippingQuote(
        destination_country=option.code.value,
        country_name=option.name,
        weight=weight,
        multiplier=option.multiplier,
        shipping_cost=cost,
        shipping_cost_display=format_currency(cost),
    )


# ==== DISPLAY FORMATTING ==== #


def format_currency(
    amount: float,
    currency: Optional[str] = None,
    locale: Optional[str] = None
) -> str:
    """
    Format an amount with two decimals, the currency symbol and the
    grouping convention of the configured locale.

    >>> format_currency(1234567.5)
    '₹12,34,567.50'
    """
    return babel_format_currency(
        amount,
        currency or settings.CURRENCY_CODE,
        locale=locale or settings.CURRENCY_LOCALE,
        currency_digits=False,
    )


def describe_record(record: Any) -> Dict[str, Any]:
    """
    Build a display row for a stored box.

    Unknown destination codes fall back to the raw code. A stored color
    that cannot be parsed raises MalformedColor.
    """
    color = from_storage_string(record.box_color)
    return {
        "id": record.id,
        "receiver_name": record.receiver_name,
        "weight": record.weight,
        "box_color": record.box_color,
        "color_rgb": tuple(color),
        "color_hex": rgb_to_hex(*color),
        "destination_country": record.destination_country,
        "country_name": display_name(record.destination_country),
        "shipping_cost": record.shipping_cost,
        "shipping_cost_display": format_currency(record.shipping_cost),
        "created_at": record.created_at,
    }


def summarize(records: Iterable[Any]) -> BoxSummary:
    """Running total shown under the box list."""
    count = 0
    total = 0.0
    for record in records:
        count += 1
        total += record.shipping_cost
    return BoxSummary(count=count, total_cost=total, total_cost_display=format_currency(total))


# ==== RECORD CONSTRUCTION ==== #


def build_record(submission: BoxSubmission) -> BoxPayload:
    """
    Turn a validated submission into the payload to persist.

    The receiver name is trimmed and the cost computed; weight, color and
    destination are copied as submitted.

    Raises:
        UnknownDestination: If the destination is not in the pricing table
    """
    destination = submission.destination_country
    shipping_cost = compute_cost(submission.weight, destination)

    if isinstance(destination, DestinationCountry):
        destination = destination.value

    return BoxPayload(
        receiver_name=submission.receiver_name.strip(),
        weight=submission.weight,
        box_color=submission.box_color,
        destination_country=destination,
        shipping_cost=shipping_cost,
    )
