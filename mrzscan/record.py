"""
The canonical scan record and the record-construction step.

Normalizer output (a loose dict of strings) only becomes an MrzRecord
through build_record, which enforces the document-number rule and brings
every field to its canonical shape.
"""
from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass
from datetime import date

from mrzscan.config import Settings
from mrzscan.dates import DateContext, normalize_date
from mrzscan.errors import MrzFormatError

logger = logging.getLogger(__name__)

FILLER = "<"

FIELD_KEYS = (
	"documentType",
	"issuingCountry",
	"surname",
	"givenName",
	"documentNumber",
	"nationality",
	"dateOfBirth",
	"sex",
	"expiryDate",
	"personalNumber",
	"dateOfIssue",
	"placeOfBirth",
	"authority",
)

EXPORT_COLUMNS = (
	"Document Type",
	"Issuing Country",
	"Surname",
	"Given Name",
	"Document Number",
	"Nationality",
	"Date of Birth",
	"Sex",
	"Expiry Date",
	"Personal Number",
	"Date of Issue",
	"Place of Birth",
	"Authority",
	"File Name",
)

# Issuing countries whose personal number has a fixed length.
PERSONAL_NUMBER_LENGTHS = {
	"UZB": 14,
	"KGZ": 14,
	"KAZ": 12,
}

_SEX_CODES = {"M": "M", "F": "F", "М": "M", "Ж": "F"}
_SPACES_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class MrzRecord:
	document_type: str
	issuing_country: str
	surname: str
	given_name: str
	document_number: str
	nationality: str
	date_of_birth: str
	sex: str
	expiry_date: str
	personal_number: str = ""
	date_of_issue: str = ""
	place_of_birth: str = ""
	authority: str = ""

	def __post_init__(self):
		if not (self.document_number or "").strip():
			raise MrzFormatError("Document number is empty")

	def to_dict(self) -> dict:
		"""Record as a dict keyed by the camelCase field names, in export order."""
		return dict(zip(FIELD_KEYS, asdict(self).values()))

	def to_export_row(self, file_name: str = "") -> dict:
		row = dict(zip(EXPORT_COLUMNS, asdict(self).values()))
		row["File Name"] = file_name
		return row


def clean_name(value: str) -> str:
	"""Fillers become single spaces; the result is uppercase and trimmed."""
	text = (value or "").upper().replace(FILLER, " ")
	return _SPACES_RE.sub(" ", text).strip()


def clean_code(value: str) -> str:
	"""Fillers and whitespace are removed entirely."""
	text = (value or "").upper().replace(FILLER, "")
	return _SPACES_RE.sub("", text)


def clean_text(value: str) -> str:
	return _SPACES_RE.sub(" ", value or "").strip()


def clean_sex(value: str) -> str:
	code = (value or "").strip().upper()[:1]
	return _SEX_CODES.get(code, FILLER)


def apply_personal_number_rule(issuing_country: str, personal_number: str) -> str:
	"""Cut the personal number to the issuing country's fixed length, if it has one."""
	length = PERSONAL_NUMBER_LENGTHS.get(issuing_country)
	if length is None or not personal_number:
		return personal_number
	if len(personal_number) > length:
		logger.info("Truncating %s personal number from %d to %d characters",
			issuing_country, len(personal_number), length)
		return personal_number[:length]
	if len(personal_number) < length:
		logger.warning("%s personal number has %d characters, expected %d",
			issuing_country, len(personal_number), length)
	return personal_number


def build_record(fields: dict, today: date | None = None, settings: Settings | None = None) -> MrzRecord:
	"""
	Validate a candidate field map into an MrzRecord.

	Args:
		fields: camelCase keys to raw string values, as produced by the
			normalizer. Missing keys are treated as empty.
		today: reference date for century disambiguation.
		settings: date plausibility thresholds.

	Raises:
		MrzFormatError: when the document number is empty after cleaning,
			no matter how many other fields are populated.
	"""
	settings = settings or Settings()

	def get(key):
		return str(fields.get(key) or "")

	document_number = clean_code(get("documentNumber"))
	if not document_number:
		raise MrzFormatError(
			"Failed to extract a valid document number",
			details={"populated": sorted(k for k in FIELD_KEYS if fields.get(k))},
		)

	def date_field(key, context):
		return normalize_date(
			get(key),
			context,
			today=today,
			min_birth_year=settings.min_birth_year,
			expiry_past_years=settings.expiry_past_years,
		)

	issuing_country = clean_code(get("issuingCountry"))
	return MrzRecord(
		document_type=clean_code(get("documentType"))[:1],
		issuing_country=issuing_country,
		surname=clean_name(get("surname")),
		given_name=clean_name(get("givenName")),
		document_number=document_number,
		nationality=clean_code(get("nationality")),
		date_of_birth=date_field("dateOfBirth", DateContext.BIRTH),
		sex=clean_sex(get("sex")),
		expiry_date=date_field("expiryDate", DateContext.EXPIRY),
		personal_number=apply_personal_number_rule(issuing_country, clean_code(get("personalNumber"))),
		date_of_issue=date_field("dateOfIssue", DateContext.ISSUE),
		place_of_birth=clean_text(get("placeOfBirth")),
		authority=clean_text(get("authority")),
	)
