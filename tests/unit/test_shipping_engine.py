"""Unit tests for the shipping engine."""

import math
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from boxship.business.countries import DestinationCountry, list_countries
from boxship.business.errors import MalformedColor, UnknownDestination
from boxship.services.shipping import (
    BOX_COLOR_MALFORMED,
    BOX_COLOR_OUT_OF_RANGE,
    BOX_COLOR_REQUIRED,
    DESTINATION_REQUIRED,
    RECEIVER_NAME_REQUIRED,
    WEIGHT_NEGATIVE,
    WEIGHT_NOT_A_NUMBER,
    WEIGHT_NOT_POSITIVE,
    WEIGHT_TOO_LARGE,
    BoxSubmission,
    build_record,
    compute_cost,
    describe_record,
    format_currency,
    quote,
    summarize,
    validate,
)


def make_record(**overrides):
    """Stand-in for a stored box row."""
    values = {
        "id": "box-1",
        "receiver_name": "Alice",
        "weight": 2.0,
        "box_color": "255,0,128",
        "destination_country": "CHINA",
        "shipping_cost": 23.06,
        "created_at": datetime(2025, 8, 16, 10, 0, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.mark.unit
class TestValidate:
    """Test cases for submission validation."""

    def test_empty_form_reports_every_field(self, empty_form):
        """Test an untouched form fails all four fields at once."""
        result = validate(BoxSubmission.from_form(empty_form))

        assert not result.is_valid
        assert result.errors == {
            "receiver_name": RECEIVER_NAME_REQUIRED,
            "weight": WEIGHT_NOT_POSITIVE,
            "box_color": BOX_COLOR_REQUIRED,
            "destination_country": DESTINATION_REQUIRED,
        }

    def test_valid_form_has_no_errors(self, valid_form):
        """Test a complete form passes."""
        result = validate(BoxSubmission.from_form(valid_form))

        assert result.is_valid
        assert result.errors == {}
        assert result.weight == 2.5

    def test_blank_receiver_name(self, valid_form):
        """Test whitespace-only names are rejected."""
        valid_form["receiver_name"] = "   "

        result = validate(BoxSubmission.from_form(valid_form))

        assert result.errors == {"receiver_name": RECEIVER_NAME_REQUIRED}

    def test_negative_weight_is_reset(self, valid_form):
        """Test a negative weight is reported and reset to zero."""
        valid_form["weight"] = -3

        result = validate(BoxSubmission.from_form(valid_form))

        assert result.errors == {"weight": WEIGHT_NEGATIVE}
        assert result.weight == 0

    @pytest.mark.parametrize("weight", [math.nan, math.inf, -math.inf, "heavy"])
    def test_weight_not_a_number(self, valid_form, weight):
        """Test non-finite and unparsable weights."""
        valid_form["weight"] = weight

        result = validate(BoxSubmission.from_form(valid_form))

        assert result.errors == {"weight": WEIGHT_NOT_A_NUMBER}

    def test_malformed_color(self, valid_form):
        """Test a color that is not r,g,b."""
        valid_form["box_color"] = "#ff0000"

        result = validate(BoxSubmission.from_form(valid_form))

        assert result.errors == {"box_color": BOX_COLOR_MALFORMED}

    @pytest.mark.parametrize("color", ["999,-5,300", "256,0,0", "0,0,-1"])
    def test_color_channel_out_of_range(self, valid_form, color):
        """Test parsable colors with channels outside 0-255 are rejected."""
        valid_form["box_color"] = color

        result = validate(BoxSubmission.from_form(valid_form))

        assert result.errors == {"box_color": BOX_COLOR_OUT_OF_RANGE}

    def test_color_channel_bounds_accepted(self, valid_form):
        """Test the channel bounds themselves are valid."""
        valid_form["box_color"] = "0,255,0"

        assert validate(BoxSubmission.from_form(valid_form)).is_valid

    def test_weight_too_large_to_price(self, valid_form):
        """Test a finite weight whose cost overflows is rejected."""
        valid_form["weight"] = 1e307
        valid_form["destination_country"] = "AUSTRALIA"

        result = validate(BoxSubmission.from_form(valid_form))

        assert result.errors == {"weight": WEIGHT_TOO_LARGE}
        assert result.weight == 1e307

    def test_large_weight_with_finite_cost(self, valid_form):
        """Test the overflow check depends on the destination multiplier."""
        valid_form["weight"] = 1e307
        valid_form["destination_country"] = "SWEDEN"

        result = validate(BoxSubmission.from_form(valid_form))

        assert result.is_valid
        assert math.isfinite(build_record(BoxSubmission.from_form(valid_form)).shipping_cost)

    def test_unknown_destination(self, valid_form):
        """Test an unrecognized destination code is named in the message."""
        valid_form["destination_country"] = "ATLANTIS"

        result = validate(BoxSubmission.from_form(valid_form))

        assert result.errors == {
            "destination_country": "Unknown destination country: ATLANTIS"
        }

    def test_enum_destination_accepted(self, valid_form):
        """Test a destination given as enum member."""
        valid_form["destination_country"] = DestinationCountry.BRAZIL

        result = validate(BoxSubmission.from_form(valid_form))

        assert result.is_valid


@pytest.mark.unit
class TestFromForm:
    """Test cases for building submissions from form fields."""

    @pytest.mark.parametrize(
        "raw, expected",
        [(None, 0.0), ("", 0.0), ("  ", 0.0), ("2.5", 2.5), (3, 3.0), (True, 0.0)],
    )
    def test_weight_parsing(self, raw, expected):
        """Test loosely typed weight values."""
        assert BoxSubmission.from_form({"weight": raw}).weight == expected

    def test_unparsable_weight_is_nan(self):
        """Test text that is not a number becomes NaN."""
        assert math.isnan(BoxSubmission.from_form({"weight": "abc"}).weight)

    def test_wrongly_typed_fields_become_text(self):
        """Test non-string fields are coerced and then fail validation."""
        submission = BoxSubmission.from_form(
            {"receiver_name": None, "weight": [1], "box_color": [1, 2, 3], "destination_country": 5}
        )

        assert submission.receiver_name == ""
        assert math.isnan(submission.weight)
        assert submission.destination_country == "5"
        assert validate(submission).errors == {
            "receiver_name": RECEIVER_NAME_REQUIRED,
            "weight": WEIGHT_NOT_A_NUMBER,
            "box_color": BOX_COLOR_MALFORMED,
            "destination_country": "Unknown destination country: 5",
        }

    def test_missing_fields_default_blank(self):
        """Test an empty mapping gives an untouched form."""
        submission = BoxSubmission.from_form({})

        assert submission == BoxSubmission()


@pytest.mark.unit
class TestComputeCost:
    """Test cases for cost computation."""

    @pytest.mark.parametrize("weight", [0.1, 1.0, 2.5, 12.75, 1000.0])
    def test_cost_is_weight_times_multiplier(self, weight):
        """Test cost for every destination and several weights."""
        for option in list_countries():
            assert compute_cost(weight, option.code.value) == weight * option.multiplier
            assert compute_cost(weight, option.code) == weight * option.multiplier

    def test_no_rounding(self):
        """Test the raw product is returned."""
        assert compute_cost(1.001, "AUSTRALIA") == 1.001 * 50.09

    def test_unknown_destination_raises(self):
        """Test unknown codes are a system error."""
        with pytest.raises(UnknownDestination):
            compute_cost(1.0, "ATLANTIS")

    def test_quote(self):
        """Test the estimated cost preview."""
        estimate = quote(2.0, "CHINA")

        assert estimate.destination_country == "CHINA"
        assert estimate.country_name == "China"
        assert estimate.multiplier == 11.53
        assert estimate.shipping_cost == 2.0 * 11.53
        assert estimate.shipping_cost_display == format_currency(2.0 * 11.53)

    def test_quote_unknown_destination(self):
        """Test quoting an unknown destination fails hard."""
        with pytest.raises(UnknownDestination):
            quote(1.0, "ATLANTIS")


@pytest.mark.unit
class TestBuildRecord:
    """Test cases for record construction."""

    def test_build_record(self, valid_form):
        """Test the payload for a valid form."""
        payload = build_record(BoxSubmission.from_form(valid_form))

        assert payload.receiver_name == "Alice"
        assert payload.weight == 2.5
        assert payload.box_color == "255,0,0"
        assert payload.destination_country == "SWEDEN"
        assert payload.shipping_cost == pytest.approx(18.375)
        assert payload.shipping_cost == 2.5 * 7.35

    def test_enum_destination_stored_as_code(self, valid_form):
        """Test enum destinations are stored as their code."""
        valid_form["destination_country"] = DestinationCountry.AUSTRALIA

        payload = build_record(BoxSubmission.from_form(valid_form))

        assert payload.destination_country == "AUSTRALIA"
        assert type(payload.destination_country) is str

    def test_payload_has_no_identity(self, valid_form):
        """Test id and created_at are left to the store."""
        data = build_record(BoxSubmission.from_form(valid_form)).as_dict()

        assert set(data) == {
            "receiver_name",
            "weight",
            "box_color",
            "destination_country",
            "shipping_cost",
        }

    def test_unknown_destination_raises(self, valid_form):
        """Test building a record for an unknown code fails."""
        valid_form["destination_country"] = "ATLANTIS"

        with pytest.raises(UnknownDestination):
            build_record(BoxSubmission.from_form(valid_form))


@pytest.mark.unit
class TestFormatting:
    """Test cases for display helpers."""

    def test_format_currency_indian_grouping(self):
        """Test symbol, grouping and two decimals."""
        formatted = format_currency(1234567.5)

        assert "₹" in formatted
        assert formatted.endswith("12,34,567.50")

    def test_format_currency_rounds_to_two_decimals(self):
        """Test display rounding."""
        assert format_currency(1.004, "INR", "en_IN").endswith("1.00")
        assert format_currency(1.006, "INR", "en_IN").endswith("1.01")

    def test_format_currency_zero_and_negative(self):
        """Test zero and negative amounts format."""
        assert format_currency(0).endswith("0.00")
        assert "5.00" in format_currency(-5)
        assert "-" in format_currency(-5)

    def test_format_currency_explicit_currency(self):
        """Test overriding currency and locale."""
        assert format_currency(1234.5, "USD", "en_US") == "$1,234.50"

    def test_describe_record(self):
        """Test a display row for a stored record."""
        row = describe_record(make_record())

        assert row["country_name"] == "China"
        assert row["color_rgb"] == (255, 0, 128)
        assert row["color_hex"] == "#ff0080"
        assert row["shipping_cost_display"] == format_currency(23.06)
        assert row["id"] == "box-1"

    def test_describe_record_unknown_destination_falls_back(self):
        """Test display is lenient about destination codes."""
        row = describe_record(make_record(destination_country="ATLANTIS"))

        assert row["country_name"] == "ATLANTIS"

    def test_describe_record_malformed_color_raises(self):
        """Test display is strict about stored colors."""
        with pytest.raises(MalformedColor):
            describe_record(make_record(box_color="not-a-color"))

    def test_summarize(self):
        """Test the running total."""
        records = [make_record(shipping_cost=10.0), make_record(shipping_cost=2.5)]

        summary = summarize(records)

        assert summary.count == 2
        assert summary.total_cost == 12.5
        assert summary.total_cost_display == format_currency(12.5)

    def test_summarize_empty(self):
        """Test the running total of no records."""
        summary = summarize([])

        assert summary.count == 0
        assert summary.total_cost == 0.0
        assert summary.total_cost_display.endswith("0.00")
