"""
Turn raw text from a text-generation service into a candidate field map.

Services answer in whatever shape they like: a JSON object inside prose or
a ```json fence, a one-element JSON array, keys in English or Russian, or a
bare CSV line. normalize_response() accepts all of these and returns a dict
keyed by the canonical camelCase field names. Only structure is checked
here; build_record() does the semantic validation.
"""
from __future__ import annotations

import csv
import json
import logging
import re

from mrzscan.errors import IncompleteDataError, UnparsableResponseError
from mrzscan.record import FIELD_KEYS

logger = logging.getLogger(__name__)

# Consulted in order; the English camelCase key always comes first so it
# wins when a response carries both spellings.
FIELD_ALIASES = (
	("documentType", ("document_type", "Document Type", "Тип документа", "Тип")),
	("issuingCountry", ("issuing_country", "Issuing Country", "Страна выдачи", "Государство выдачи")),
	("surname", ("last_name", "Surname", "Фамилия")),
	("givenName", ("given_name", "given_names", "Given Name", "Имя")),
	("documentNumber", ("document_number", "Document Number", "Номер документа", "Номер паспорта", "Номер")),
	("nationality", ("Nationality", "Гражданство")),
	("dateOfBirth", ("date_of_birth", "birth_date", "Date of Birth", "Дата рождения")),
	("sex", ("gender", "Sex", "Пол")),
	("expiryDate", ("expiry_date", "date_of_expiry", "Expiry Date", "Дата окончания срока действия",
					"Срок действия")),
	("personalNumber", ("personal_number", "Personal Number", "Личный номер", "Персональный номер", "ПИНФЛ")),
	("dateOfIssue", ("date_of_issue", "issue_date", "Date of Issue", "Дата выдачи")),
	("placeOfBirth", ("place_of_birth", "Place of Birth", "Место рождения")),
	("authority", ("issuing_authority", "Authority", "Орган выдачи", "Кем выдан")),
)

_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*$")
_PAIRS = {"{": "}", "[": "]"}
# Fewer comma-separated cells than this is prose, not a truncated row.
_MIN_CSV_COLUMNS = 5


def _excerpt(text: str) -> str:
	return (text or "").strip()[:200]


def extract_json(text: str):
	"""
	Parse the JSON embedded in a response.

	The substring from the first opening brace or bracket to the last
	matching closer is parsed; everything around it is ignored. Returns
	None when the text holds no bracket at all.
	"""
	starts = [i for i in (text.find("{"), text.find("[")) if i != -1]
	if not starts:
		return None
	start = min(starts)
	end = text.rfind(_PAIRS[text[start]])
	if end <= start:
		raise UnparsableResponseError("unbalanced JSON brackets", _excerpt(text))

	candidate = text[start:end + 1]
	try:
		return json.loads(candidate)
	except json.JSONDecodeError as e:
		logger.error("Failed to parse JSON response: %s", e)
		logger.debug("Cleaned response text: %s", candidate)
		raise UnparsableResponseError(f"invalid JSON ({e.msg})", candidate) from e


def reconcile_fields(obj: dict) -> dict:
	"""Map English or alternate-language keys onto the canonical field names."""
	fields = {}
	for canonical, alternates in FIELD_ALIASES:
		value = None
		for key in (canonical,) + alternates:
			if obj.get(key) not in (None, ""):
				value = obj[key]
				break
		fields[canonical] = "" if value is None else str(value).strip()
	return fields


def _is_header(cells) -> bool:
	first = cells[0].strip().lower().replace(" ", "") if cells else ""
	return first in ("documenttype", "document_type", "типдокумента")


def parse_csv_line(text: str) -> dict:
	"""
	Read a flat CSV answer in FIELD_KEYS column order.

	Code fences and a header row are skipped; the first remaining line is
	the data row.
	"""
	lines = [ln for ln in text.splitlines() if ln.strip() and not _FENCE_RE.match(ln)]
	rows = [row for row in csv.reader(lines, skipinitialspace=True) if row]
	rows = [row for row in rows if not _is_header(row)]
	if not rows:
		raise UnparsableResponseError("no CSV data row", _excerpt(text))

	row = rows[0]
	if len(row) < _MIN_CSV_COLUMNS:
		raise UnparsableResponseError("no CSV data row", _excerpt(text))
	if len(row) < len(FIELD_KEYS):
		raise IncompleteDataError(expected=len(FIELD_KEYS), found=len(row))
	return {key: value.strip() for key, value in zip(FIELD_KEYS, row)}


def normalize_response(text: str) -> dict:
	"""
	Produce a canonical field map from a raw service response.

	Raises:
		UnparsableResponseError: no JSON or CSV structure in the text.
		IncompleteDataError: a CSV row with fewer columns than required.
	"""
	if not text or not text.strip():
		raise UnparsableResponseError("empty response")

	parsed = extract_json(text)
	if parsed is None:
		if "," not in text:
			raise UnparsableResponseError("no JSON object or CSV row found", _excerpt(text))
		logger.debug("No JSON in response, reading it as CSV")
		return parse_csv_line(text)

	if isinstance(parsed, list):
		if not parsed or not isinstance(parsed[0], dict):
			raise UnparsableResponseError("JSON array does not hold an object", _excerpt(text))
		if len(parsed) > 1:
			logger.warning("Response holds %d objects, using the first", len(parsed))
		parsed = parsed[0]
	if not isinstance(parsed, dict):
		raise UnparsableResponseError("JSON value is not an object", _excerpt(text))

	return reconcile_fields(parsed)
