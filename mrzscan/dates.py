"""
Century disambiguation for MRZ dates.

MRZ dates are printed as YYMMDD with no century. Birth dates are assumed
to lie in the past; expiry dates are assumed to fall inside a window that
starts a few years before today. Failures never raise: callers get an
empty string and keep the rest of the record.
"""
from __future__ import annotations

import enum
import logging
import re
from datetime import date, datetime

from dateutil import parser

logger = logging.getLogger(__name__)

DEFAULT_MIN_BIRTH_YEAR = 1940
DEFAULT_EXPIRY_PAST_YEARS = 10

_FULL_YEAR_RE = re.compile(r"\b\d{4}\b")
_YYMMDD_RE = re.compile(r"^\d{6}$")
# Day or month absent from a full date reads as the first.
_MISSING_PARTS = datetime(2000, 1, 1)


class DateContext(enum.Enum):
	BIRTH = "dateOfBirth"
	EXPIRY = "expiryDate"
	ISSUE = "dateOfIssue"


def _format(day: int, month: int, year: int) -> str:
	return f"{day:02d}.{month:02d}.{year:04d}"


def _in_range(day: int, month: int) -> bool:
	return 1 <= month <= 12 and 1 <= day <= 31


def disambiguate_date(
	yymmdd: str,
	context: DateContext,
	today: date | None = None,
	min_birth_year: int = DEFAULT_MIN_BIRTH_YEAR,
	expiry_past_years: int = DEFAULT_EXPIRY_PAST_YEARS,
) -> str:
	"""Resolve a YYMMDD MRZ date to DD.MM.YYYY, or "" when it is not plausible."""
	value = (yymmdd or "").strip()
	if not _YYMMDD_RE.match(value):
		logger.debug("Not a YYMMDD date: %r", yymmdd)
		return ""

	yy, month, day = int(value[0:2]), int(value[2:4]), int(value[4:6])
	if not _in_range(day, month):
		logger.debug("Month/day out of range in %s", value)
		return ""

	today = today or date.today()
	century = today.year // 100 * 100

	if context is not DateContext.EXPIRY:
		year = century + yy if yy <= today.year % 100 else century - 100 + yy
		if context is DateContext.BIRTH and year < min_birth_year:
			logger.debug("Birth year %d before %d, dropping %s", year, min_birth_year, value)
			return ""
	else:
		year = century + yy
		if year < today.year - expiry_past_years:
			year += 100

	return _format(day, month, year)


def normalize_date(
	value: str,
	context: DateContext,
	today: date | None = None,
	min_birth_year: int = DEFAULT_MIN_BIRTH_YEAR,
	expiry_past_years: int = DEFAULT_EXPIRY_PAST_YEARS,
) -> str:
	"""
	Bring any date shape an upstream service returns to DD.MM.YYYY.

	Raw YYMMDD goes through century disambiguation. Anything carrying a
	four-digit year (25.08.1985, 1985-08-25, 16 APR 2020) is read day-first
	by dateutil; impossible calendar dates come back as "".
	"""
	text = (value or "").strip()
	if not text:
		return ""

	if _YYMMDD_RE.match(text):
		return disambiguate_date(text, context, today, min_birth_year, expiry_past_years)

	if not _FULL_YEAR_RE.search(text):
		logger.debug("No four-digit year in %s: %r", context.value, value)
		return ""
	try:
		parsed = parser.parse(text, dayfirst=True, default=_MISSING_PARTS)
	except (ValueError, OverflowError, parser.ParserError):
		logger.debug("Unreadable %s: %r", context.value, value)
		return ""

	if context is DateContext.BIRTH and parsed.year < min_birth_year:
		return ""
	return _format(parsed.day, parsed.month, parsed.year)
