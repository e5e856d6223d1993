"""Instruction text for vision models asked to read an identity document."""
from mrzscan.mrz import CONFUSABLE_CHARACTERS
from mrzscan.record import FIELD_KEYS, PERSONAL_NUMBER_LENGTHS

PREAMBLE = (
	"You are a world-class OCR system with specialized expertise in parsing "
	"Machine-Readable Zones (MRZ) and visually inspecting government-issued "
	"identity documents. Your task is to extract information with maximum accuracy."
)

VIZ_FIELDS = ("dateOfIssue", "placeOfBirth", "authority")


def _confusable_rule():
	pairs = ", ".join(f"'{letter}' is a letter, '{digit}' is a digit" for letter, digit in CONFUSABLE_CHARACTERS)
	return f"**Character Accuracy:** Be extremely careful about common OCR errors. {pairs}. '<' is a filler character."


def _country_rules():
	return [
		f"    *   **{country}:** the `personalNumber` is exactly {length} digits."
		for country, length in sorted(PERSONAL_NUMBER_LENGTHS.items())
	]


def build_extraction_prompt(output: str = "json") -> str:
	"""
	Build the prompt sent alongside the document image.

	Args:
		output: "json" asks for a single JSON object, "csv" for one CSV line
			in FIELD_KEYS column order.
	"""
	if output not in ("json", "csv"):
		raise ValueError(f"Unsupported output format: {output!r}")

	viz = ", ".join(f"'{key}'" for key in VIZ_FIELDS)
	lines = [
		PREAMBLE,
		"",
		"First, process the MRZ data according to the critical instructions below.",
		f"Second, visually inspect the rest of the document (outside of the MRZ) to find the {viz} fields. "
		"If these fields are not present, return them as empty strings.",
		"",
		"CRITICAL INSTRUCTIONS (MRZ Parsing):",
		f"1.  {_confusable_rule()}",
		"2.  **Field Parsing by Format:** Parse fields based on standard TD1, TD2, or TD3 MRZ formats.",
		"3.  **Country-Specific Rules:**",
		*_country_rules(),
		"4.  **Output Formatting Rules:**",
		"    *   **Names:** Replace all filler '<' characters with a single space.",
		"    *   **Document Number:** This field is mandatory. If you cannot extract a valid Document Number, "
		"the entire process fails.",
		"    *   **Dates:** Format every date as DD.MM.YYYY.",
		"    *   **Empty fields:** If a field is entirely composed of filler characters, return an empty string.",
		"    *   Return all other fields exactly as they are read, excluding checksum digits.",
		"",
	]
	keys = ", ".join(f'"{key}"' for key in FIELD_KEYS)
	if output == "json":
		lines.append(
			f"Respond ONLY with a valid JSON object with the following keys: {keys}. "
			"Do not include any explanatory text, markdown, or code block syntax."
		)
	else:
		lines.append(
			f"Respond ONLY with a single CSV line holding these columns in this order: {keys}. "
			"Do not include a header row or any explanatory text."
		)
	return "\n".join(lines)
