import logging
import re

from mrzscan.config import Settings
from mrzscan.dates import DateContext, disambiguate_date, normalize_date
from mrzscan.errors import MrzFormatError
from mrzscan.record import (
	MrzRecord,
	apply_personal_number_rule,
	clean_code,
	clean_name,
	clean_sex,
	clean_text,
)

logger = logging.getLogger(__name__)

# Letter/digit pairs OCR engines confuse in MRZ text. Advisory: the decoder
# reads characters as given and never re-derives check digits to correct them.
CONFUSABLE_CHARACTERS = (
	("O", "0"),
	("I", "1"),
	("S", "5"),
	("B", "8"),
	("G", "6"),
	("Z", "2"),
)

# name -> (line count, line width)
LAYOUTS = {
	"TD1": (3, 30),
	"TD2": (2, 36),
	"TD3": (2, 44),
}

# Check-digit positions as (line, start, end) segments plus the (line, index)
# of the digit itself. The "final" entry is the composite check.
CHECK_FIELDS = {
	"TD3": {
		"document_number": ([(1, 0, 9)], (1, 9)),
		"birth_date": ([(1, 13, 19)], (1, 19)),
		"expiry_date": ([(1, 21, 27)], (1, 27)),
		"optional_data": ([(1, 28, 42)], (1, 42)),
		"final": ([(1, 0, 10), (1, 13, 20), (1, 21, 43)], (1, 43)),
	},
	"TD2": {
		"document_number": ([(1, 0, 9)], (1, 9)),
		"birth_date": ([(1, 13, 19)], (1, 19)),
		"expiry_date": ([(1, 21, 27)], (1, 27)),
		"final": ([(1, 0, 10), (1, 13, 20), (1, 21, 35)], (1, 35)),
	},
	"TD1": {
		"document_number": ([(0, 5, 14)], (0, 14)),
		"birth_date": ([(1, 0, 6)], (1, 6)),
		"expiry_date": ([(1, 8, 14)], (1, 14)),
		"final": ([(0, 5, 30), (1, 0, 7), (1, 8, 15), (1, 18, 29)], (1, 29)),
	},
}

_MRZ_LINE_RE = re.compile(r"^[A-Z0-9<]{30,}$")
_WEIGHTS = [7, 3, 1]


def _char_value(ch: str) -> int:
	if ch.isdigit():
		return int(ch)
	if "A" <= ch <= "Z":
		return ord(ch) - ord("A") + 10
	return 0  # '<' or any other filler


def check_digit(field: str) -> str:
	"""ICAO 9303 check digit: 7-3-1 weighted sum modulo 10."""
	total = 0
	for i, ch in enumerate(field):
		total += _char_value(ch) * _WEIGHTS[i % 3]
	return str(total % 10)


def find_mrz_lines(text):
	"""Pick the MRZ-looking lines out of mixed OCR text, in reading order."""
	found = []
	for raw in (text or "").splitlines():
		line = raw.replace(" ", "").strip().upper()
		if not _MRZ_LINE_RE.match(line):
			continue
		if "<" in line or sum(ch.isdigit() for ch in line) >= 6:
			found.append(line)
	return found


class MrzDecoder:
	"""Decode TD1, TD2 and TD3 machine readable zones by character position."""

	def __init__(self, today=None, settings=None):
		self.today = today
		self.settings = settings or Settings()

	def _lines(self, mrz_text):
		if isinstance(mrz_text, str):
			mrz_text = mrz_text.splitlines()
		return [ln.replace(" ", "").strip().upper() for ln in mrz_text if ln.strip()]

	def _split_names(self, names_raw: str):
		surname, _, given = names_raw.partition("<<")
		return clean_name(surname), clean_name(given)

	def _date(self, raw: str, context: DateContext) -> str:
		return disambiguate_date(
			raw,
			context,
			today=self.today,
			min_birth_year=self.settings.min_birth_year,
			expiry_past_years=self.settings.expiry_past_years,
		)

	def detect_format(self, lines):
		for name, (count, width) in LAYOUTS.items():
			if len(lines) == count and all(len(line) == width for line in lines):
				return name
		raise MrzFormatError(
			"MRZ text does not match the TD1, TD2 or TD3 layout",
			details={"line_count": len(lines), "line_lengths": [len(line) for line in lines]},
		)

	def parse_td3(self, lines):
		row1, row2 = lines
		surname, given = self._split_names(row1[5:44])
		return {
			"documentType": clean_code(row1[0:1]),
			"issuingCountry": clean_code(row1[2:5]),
			"surname": surname,
			"givenName": given,
			"documentNumber": clean_code(row2[0:9]),
			"nationality": clean_code(row2[10:13]),
			"dateOfBirth": self._date(row2[13:19], DateContext.BIRTH),
			"sex": clean_sex(row2[20:21]),
			"expiryDate": self._date(row2[21:27], DateContext.EXPIRY),
			"personalNumber": clean_code(row2[28:42]),
		}

	def parse_td2(self, lines):
		row1, row2 = lines
		surname, given = self._split_names(row1[5:36])
		return {
			"documentType": clean_code(row1[0:1]),
			"issuingCountry": clean_code(row1[2:5]),
			"surname": surname,
			"givenName": given,
			"documentNumber": clean_code(row2[0:9]),
			"nationality": clean_code(row2[10:13]),
			"dateOfBirth": self._date(row2[13:19], DateContext.BIRTH),
			"sex": clean_sex(row2[20:21]),
			"expiryDate": self._date(row2[21:27], DateContext.EXPIRY),
			"personalNumber": clean_code(row2[28:35]),
		}

	def parse_td1(self, lines):
		# TD1 has three lines; document number on line 1, names on line 3
		line1, line2, line3 = lines
		surname, given = self._split_names(line3[:30])
		return {
			"documentType": clean_code(line1[0:1]),
			"issuingCountry": clean_code(line1[2:5]),
			"surname": surname,
			"givenName": given,
			"documentNumber": clean_code(line1[5:14]),
			"nationality": clean_code(line2[15:18]),
			"dateOfBirth": self._date(line2[:6], DateContext.BIRTH),
			"sex": clean_sex(line2[7:8]),
			"expiryDate": self._date(line2[8:14], DateContext.EXPIRY),
			"personalNumber": clean_code(line1[15:30]) or clean_code(line2[18:29]),
		}

	def parse(self, mrz_text):
		"""Slice the MRZ into a field map; no record-level checks yet."""
		lines = self._lines(mrz_text)
		mrz_type = self.detect_format(lines)
		logger.debug("Detected %s layout", mrz_type)

		parsers = {
			"TD3": self.parse_td3,
			"TD2": self.parse_td2,
			"TD1": self.parse_td1,
		}
		return mrz_type, parsers[mrz_type](lines)

	def decode(self, mrz_text, viz=None) -> MrzRecord:
		"""
		Decode MRZ lines into an MrzRecord.

		Args:
			mrz_text: the MRZ block as a string or a list of lines.
			viz: optional visual-zone values keyed dateOfIssue, placeOfBirth
				and authority, read outside the MRZ.

		Raises:
			MrzFormatError: unknown layout, or the document number is all filler.
		"""
		mrz_type, fields = self.parse(mrz_text)
		viz = viz or {}
		if not fields["documentNumber"]:
			raise MrzFormatError(
				"Document number is empty in the MRZ",
				details={"format": mrz_type},
			)

		return MrzRecord(
			document_type=fields["documentType"],
			issuing_country=fields["issuingCountry"],
			surname=fields["surname"],
			given_name=fields["givenName"],
			document_number=fields["documentNumber"],
			nationality=fields["nationality"],
			date_of_birth=fields["dateOfBirth"],
			sex=fields["sex"],
			expiry_date=fields["expiryDate"],
			personal_number=apply_personal_number_rule(fields["issuingCountry"], fields["personalNumber"]),
			date_of_issue=normalize_date(
				viz.get("dateOfIssue", ""), DateContext.ISSUE, today=self.today
			),
			place_of_birth=clean_text(viz.get("placeOfBirth", "")),
			authority=clean_text(viz.get("authority", "")),
		)

	def verify(self, mrz_text):
		"""
		Report the embedded check digits. Purely informational: decode()
		never consults this.
		"""
		lines = self._lines(mrz_text)
		mrz_type = self.detect_format(lines)
		report = {}
		for name, (segments, (row, index)) in CHECK_FIELDS[mrz_type].items():
			field = "".join(lines[r][start:end] for r, start, end in segments)
			found = lines[row][index]
			expected = check_digit(field)
			# An all-filler field may carry a filler check digit.
			valid = expected == found or (found == "<" and set(field) == {"<"})
			report[name] = {"expected": expected, "found": found, "valid": valid}
		return report
