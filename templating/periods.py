"""
Relative time expression resolver.

Resolves the small "now plus period terms" mini-language used by the date
helpers into epoch milliseconds:

- ``""``, ``"0"``, ``"now"`` or ``None``: the current instant
- ``1718000000000``: epoch millis, returned unchanged
- ``"now1m0d,0m-5d"``: now plus one calendar month, then minus five days

Each term is ``<months>m<days>d``; both components are required (either may be
zero or negative) and terms are applied strictly left to right.
"""

import re
import math
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, List, Union

import pytz
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

NOW_TOKEN = "now"
EPOCH = datetime(1970, 1, 1, tzinfo=pytz.utc)

_TERM_PATTERN = re.compile(r"^([+-]?\d+)m([+-]?\d+)d$")
_REVERSED_TERM_PATTERN = re.compile(r"^[+-]?\d+d[+-]?\d+m$")
_NUMERIC_PATTERN = re.compile(r"^[+-]?\d+$")

Clock = Union[datetime, int, None]


class MalformedTimeExpression(ValueError):
    """Exception raised when a time source cannot be resolved."""
    def __init__(self, message: str, term: str = None, expression: str = None):
        self.term = term
        self.expression = expression
        super().__init__(message)


@dataclass(frozen=True)
class PeriodTerm:
    """One calendar offset: months are applied before days."""
    months: int
    days: int

    def __str__(self):
        return f"{self.months}m{self.days}d"

    @property
    def delta(self) -> relativedelta:
        # relativedelta adds months (clipping the day of month) before days
        return relativedelta(months=self.months, days=self.days)


def parse_time_expression(expression: str) -> List[PeriodTerm]:
    """
    Tokenize a "now"-anchored expression into its ordered period terms.
    
    Args:
        expression: String such as ``"now"`` or ``"now1m0d,0m-5d"``
        
    Returns:
        Period terms in evaluation order (empty for a bare ``"now"``)
        
    Raises:
        MalformedTimeExpression: If the anchor is missing or any term is malformed
    """
    text = expression.strip()
    if not text.startswith(NOW_TOKEN):
        raise MalformedTimeExpression(
            f"Time expression must start with '{NOW_TOKEN}': '{expression}'",
            term=text,
            expression=expression
        )
    
    remainder = text[len(NOW_TOKEN):]
    if not remainder:
        return []
    
    terms = []
    for raw_term in remainder.split(","):
        term = raw_term.strip()
        match = _TERM_PATTERN.match(term)
        if match is None:
            if _REVERSED_TERM_PATTERN.match(term):
                reason = "months must come before days"
            else:
                reason = "expected <months>m<days>d"
            raise MalformedTimeExpression(
                f"Malformed period term '{term}' in '{expression}': {reason}",
                term=term,
                expression=expression
            )
        terms.append(PeriodTerm(months=int(match.group(1)), days=int(match.group(2))))
    
    return terms


def apply_period_terms(start: datetime, terms: List[PeriodTerm], tz=None,
                       expression: str = None) -> datetime:
    """
    Apply period terms in order using calendar arithmetic in ``tz``.
    
    Wall-clock time is kept across DST changes; every intermediate result is
    re-localized before the next term is applied.
    
    Raises:
        MalformedTimeExpression: If a term moves the instant out of range
    """
    zone = tz or pytz.utc
    current = start.astimezone(zone)
    for term in terms:
        try:
            local = current.replace(tzinfo=None) + term.delta
            current = _safe_localize(local, zone)
        except (ValueError, OverflowError) as e:
            raise MalformedTimeExpression(
                f"Period term '{term}' is out of range: {e}",
                term=str(term),
                expression=expression
            ) from e
    return current


def _safe_localize(dt: datetime, tz) -> datetime:
    """Localize a naive datetime, resolving DST gaps and overlaps."""
    if not hasattr(tz, "localize"):
        return dt.replace(tzinfo=tz)
    try:
        return tz.localize(dt, is_dst=None)
    except pytz.AmbiguousTimeError:
        logger.debug(f"Ambiguous local time, using standard time: {dt}")
        return tz.localize(dt, is_dst=False)
    except pytz.NonExistentTimeError:
        logger.debug(f"Non-existent local time, advancing 1 hour: {dt}")
        return tz.localize(dt + timedelta(hours=1), is_dst=True)


def to_millis(dt: datetime) -> int:
    """Epoch milliseconds for a datetime; naive values are taken as UTC."""
    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)
    return (dt - EPOCH) // timedelta(milliseconds=1)


def from_millis(millis: int, tz=None) -> datetime:
    """Timezone-aware datetime for epoch milliseconds."""
    return (EPOCH + timedelta(milliseconds=int(millis))).astimezone(tz or pytz.utc)


def utcnow() -> datetime:
    """Current time in UTC; the single clock read used for "now"."""
    return datetime.now(pytz.utc)


def _is_finite(number) -> bool:
    if isinstance(number, Decimal):
        return number.is_finite()
    if isinstance(number, float):
        return math.isfinite(number)
    return True


def _current_time(now: Clock) -> datetime:
    if now is None:
        return utcnow()
    if isinstance(now, datetime):
        return now if now.tzinfo is not None else pytz.utc.localize(now)
    return from_millis(now)


def resolve_time(source: Any, now: Clock = None, tz=None) -> int:
    """
    Resolve a time source to epoch milliseconds.
    
    Args:
        source: None, "", "0", "now", a "now"-prefixed expression, epoch
            millis (int/float or an integer string) or a datetime
        now: Current time override (datetime or epoch millis)
        tz: Zone used for calendar arithmetic (defaults to UTC)
        
    Returns:
        Epoch milliseconds
        
    Raises:
        MalformedTimeExpression: If the source is not resolvable
        
    Examples:
        >>> resolve_time("now0m15d", now=datetime(2024, 1, 20, tzinfo=pytz.utc))
        1707004800000
    """
    if source is None:
        return to_millis(_current_time(now))
    
    if isinstance(source, bool):
        raise MalformedTimeExpression(
            f"Cannot resolve boolean time source: {source!r}",
            term=str(source)
        )
    
    if isinstance(source, datetime):
        return to_millis(source)
    
    if isinstance(source, (int, float, Decimal)):
        if not _is_finite(source):
            raise MalformedTimeExpression(
                f"Time source is not a finite number: {source!r}",
                term=repr(source)
            )
        if source == 0:
            return to_millis(_current_time(now))
        return int(source)
    
    if not isinstance(source, str):
        raise MalformedTimeExpression(
            f"Unsupported time source type: {type(source).__name__}",
            term=repr(source)
        )
    
    text = source.strip()
    if text in ("", "0", NOW_TOKEN):
        return to_millis(_current_time(now))
    
    if text.startswith(NOW_TOKEN):
        terms = parse_time_expression(text)
        result = apply_period_terms(_current_time(now), terms, tz, expression=source)
        return to_millis(result)
    
    if _NUMERIC_PATTERN.match(text):
        return int(text)
    
    raise MalformedTimeExpression(
        f"Time source is neither numeric nor a '{NOW_TOKEN}' expression: '{source}'",
        term=text,
        expression=source
    )
