#!/usr/bin/env python3
"""
Unit tests for relative time expression resolution.

Tests the "now" anchor and period terms including:
- Empty and literal sources resolving to the current instant
- Calendar-aware month and day arithmetic
- Left-to-right term ordering
- Rejection of malformed expressions
- DST handling in non-UTC zones
"""

import time
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
import pytz

from templating.periods import (
    MalformedTimeExpression, PeriodTerm, apply_period_terms, from_millis,
    parse_time_expression, resolve_time, to_millis
)


class TestCurrentInstant:
    """Sources that mean "now"."""

    @pytest.mark.parametrize("source", [None, "", "0", "now", "  now  ", 0])
    def test_now_sources_with_fixed_clock(self, source, fixed_now):
        """Empty, zero and bare "now" resolve to the injected clock."""
        assert resolve_time(source, now=fixed_now) == to_millis(fixed_now)

    @pytest.mark.parametrize("source", ["", "0", "now"])
    def test_now_sources_with_real_clock(self, source):
        """Without an injected clock the result tracks the wall clock."""
        before = int(time.time() * 1000)
        resolved = resolve_time(source)
        after = int(time.time() * 1000)

        assert before - 5 <= resolved <= after + 5

    def test_literal_comparison_uses_value_equality(self, fixed_now):
        """A "now" built at runtime is recognised like the literal."""
        built = "".join(["n", "o", "w"])
        assert resolve_time(built, now=fixed_now) == to_millis(fixed_now)

    def test_clock_as_epoch_millis(self, fixed_now):
        millis = to_millis(fixed_now)
        assert resolve_time("now", now=millis) == millis


class TestNumericSources:
    """Epoch millis pass through unchanged."""

    def test_integer_millis_returned_unchanged(self):
        assert resolve_time(1718000000000) == 1718000000000

    def test_float_millis_truncated_to_int(self):
        result = resolve_time(1718000000000.9)
        assert result == 1718000000000
        assert isinstance(result, int)

    def test_numeric_string(self):
        assert resolve_time("1718000000000") == 1718000000000

    def test_datetime_source(self, fixed_now):
        assert resolve_time(fixed_now) == to_millis(fixed_now)

    def test_naive_datetime_taken_as_utc(self):
        assert resolve_time(datetime(1970, 1, 1, 0, 0, 1)) == 1000


class TestPeriodArithmetic:
    """Calendar-aware month/day offsets."""

    def test_days_only_crosses_month_boundary(self, fixed_now):
        """now0m15d from Jan 31 lands on Feb 15."""
        result = from_millis(resolve_time("now0m15d", now=fixed_now))
        assert result == datetime(2024, 2, 15, 12, 0, tzinfo=pytz.utc)

    def test_month_addition_clips_to_month_end(self, fixed_now):
        """Jan 31 plus one month is Feb 29 in a leap year, not Mar 1/2."""
        result = from_millis(resolve_time("now1m0d", now=fixed_now))
        assert result == datetime(2024, 2, 29, 12, 0, tzinfo=pytz.utc)

    def test_terms_applied_in_order(self, fixed_now):
        """now1m0d,0m-5d is (now + 1 month) - 5 days."""
        result = from_millis(resolve_time("now1m0d,0m-5d", now=fixed_now))
        assert result == datetime(2024, 2, 24, 12, 0, tzinfo=pytz.utc)

    def test_reversed_terms_give_different_result(self, fixed_now):
        """Swapping the terms across a month boundary changes the answer."""
        forward = resolve_time("now1m0d,0m-5d", now=fixed_now)
        reverse = resolve_time("now0m-5d,1m0d", now=fixed_now)

        assert forward != reverse
        assert from_millis(reverse) == datetime(2024, 2, 26, 12, 0, tzinfo=pytz.utc)

    def test_months_before_days_within_term(self, fixed_now):
        """Within a term months are added first: Jan 31 +1m = Feb 29, +1d = Mar 1."""
        result = from_millis(resolve_time("now1m1d", now=fixed_now))
        assert result == datetime(2024, 3, 1, 12, 0, tzinfo=pytz.utc)

    def test_negative_months(self, fixed_now):
        result = from_millis(resolve_time("now-2m0d", now=fixed_now))
        assert result == datetime(2023, 11, 30, 12, 0, tzinfo=pytz.utc)

    def test_explicit_plus_sign(self, fixed_now):
        result = from_millis(resolve_time("now+0m+1d", now=fixed_now))
        assert result == datetime(2024, 2, 1, 12, 0, tzinfo=pytz.utc)

    def test_whitespace_around_terms(self, fixed_now):
        assert resolve_time(" now1m0d, 0m-5d ", now=fixed_now) == \
            resolve_time("now1m0d,0m-5d", now=fixed_now)

    def test_deterministic_for_fixed_clock(self, fixed_now):
        results = {resolve_time("now3m-10d,0m7d", now=fixed_now) for _ in range(10)}
        assert len(results) == 1

    def test_long_term_list(self, fixed_now):
        """A thousand one-day terms equal a thousand days."""
        expression = "now" + ",".join(["0m1d"] * 1000)
        result = from_millis(resolve_time(expression, now=fixed_now))
        assert result == fixed_now + timedelta(days=1000)


class TestTimezoneArithmetic:
    """Day steps keep wall-clock time across DST changes."""

    def test_day_step_across_spring_forward(self):
        new_york = pytz.timezone("America/New_York")
        start = new_york.localize(datetime(2024, 3, 9, 12, 0))

        result = from_millis(resolve_time("now0m1d", now=start, tz=new_york), new_york)

        assert (result.day, result.hour) == (10, 12)
        assert result - start == timedelta(hours=23)

    def test_apply_period_terms_localizes_result(self):
        chisinau = pytz.timezone("Europe/Chisinau")
        start = chisinau.localize(datetime(2024, 10, 26, 9, 0))

        result = apply_period_terms(start, [PeriodTerm(0, 1)], chisinau)

        assert result.hour == 9
        assert result.utcoffset() == timedelta(hours=2)


class TestParsing:
    """Tokenizer output and failures."""

    def test_parse_terms(self):
        assert parse_time_expression("now1m0d,0m-5d") == [PeriodTerm(1, 0), PeriodTerm(0, -5)]

    def test_bare_now_has_no_terms(self):
        assert parse_time_expression("now") == []

    @pytest.mark.parametrize("expression", [
        "now5d0m",        # days before months
        "nowabc",
        "now1m",          # days missing
        "now15d",         # months missing
        "now1m0d,",       # empty trailing term
        "now1m0d,,0m1d",
        "now1.5m0d",
        "now1M0D",
    ])
    def test_malformed_expressions_rejected(self, expression, fixed_now):
        with pytest.raises(MalformedTimeExpression):
            resolve_time(expression, now=fixed_now)

    def test_error_identifies_offending_term(self):
        with pytest.raises(MalformedTimeExpression) as exc_info:
            resolve_time("now1m0d,5d0m")

        assert exc_info.value.term == "5d0m"
        assert exc_info.value.expression == "now1m0d,5d0m"
        assert "months must come before days" in str(exc_info.value)

    @pytest.mark.parametrize("source", ["tomorrow", "12abc", "1m0d", True, object(), [1]])
    def test_non_numeric_non_now_sources_rejected(self, source):
        with pytest.raises(MalformedTimeExpression):
            resolve_time(source)

    def test_parse_requires_anchor(self):
        with pytest.raises(MalformedTimeExpression):
            parse_time_expression("1m0d")

    def test_malformed_is_value_error(self):
        """Callers catching ValueError also see malformed expressions."""
        with pytest.raises(ValueError):
            resolve_time("nowabc")


class TestOutOfRange:
    """Failures past the representable calendar are reported as malformed."""

    @pytest.mark.parametrize("expression,term", [
        ("now120000m0d", "120000m0d"),
        ("now0m1d,-30000m0d", "-30000m0d"),
        ("now0m999999999d", "0m999999999d"),
    ])
    def test_out_of_range_term(self, expression, term, fixed_now):
        with pytest.raises(MalformedTimeExpression) as exc_info:
            resolve_time(expression, now=fixed_now)

        assert exc_info.value.term == term
        assert exc_info.value.expression == expression
        assert exc_info.value.__cause__ is not None

    @pytest.mark.parametrize("source", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_float_rejected(self, source):
        with pytest.raises(MalformedTimeExpression):
            resolve_time(source)

    @pytest.mark.parametrize("source", [Decimal("Infinity"), Decimal("NaN")])
    def test_non_finite_decimal_rejected(self, source):
        with pytest.raises(MalformedTimeExpression):
            resolve_time(source)

    def test_term_string_form(self):
        assert str(PeriodTerm(1, -5)) == "1m-5d"
