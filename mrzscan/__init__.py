"""MRZ document scanning core: decoding, date handling and response normalization."""

from mrzscan.auth import TokenCache
from mrzscan.errors import (
	IncompleteDataError,
	InvalidImageError,
	MrzFormatError,
	MrzNotFoundError,
	ScanError,
	UnparsableResponseError,
)
from mrzscan.export import records_to_frame
from mrzscan.prompts import build_extraction_prompt
from mrzscan.record import EXPORT_COLUMNS, FIELD_KEYS, MrzRecord, build_record

__all__ = [
	"EXPORT_COLUMNS",
	"FIELD_KEYS",
	"IncompleteDataError",
	"InvalidImageError",
	"MrzFormatError",
	"MrzNotFoundError",
	"MrzRecord",
	"ScanError",
	"TokenCache",
	"UnparsableResponseError",
	"build_extraction_prompt",
	"build_record",
	"records_to_frame",
]

__version__ = "0.3.0"
