"""
One-document-at-a-time scanning: text or image in, ScanResult out.

Typed scan errors become error results so a batch keeps going; anything
else (a Tesseract crash, a bug) propagates.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Tuple, Union

from mrzscan.config import Settings
from mrzscan.errors import ScanError
from mrzscan.mrz import LAYOUTS, MrzDecoder, find_mrz_lines
from mrzscan.normalizer import normalize_response
from mrzscan.ocr import read_mrz_text
from mrzscan.record import MrzRecord, build_record

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass
class ScanResult:
	file_name: str
	status: str
	record: Optional[MrzRecord] = None
	error: Optional[dict] = None
	mrz_text: str = ""
	elapsed: float = 0.0

	@property
	def ok(self) -> bool:
		return self.status == SUCCESS


def _mrz_block(lines: List[str]) -> Optional[List[str]]:
	"""Trailing run of lines that has the shape of one known layout."""
	for count, width in sorted(LAYOUTS.values(), reverse=True):
		block = lines[-count:]
		if len(block) == count and all(len(line) == width for line in block):
			return block
	return None


def _has_json(text: str) -> bool:
	return "{" in text or "[" in text


def _viz_fields(text: str) -> dict:
	if "{" not in text:
		return {}
	try:
		return normalize_response(text)
	except ScanError as e:
		logger.debug("No visual-zone fields in response: %s", e.message)
		return {}


def _error(file_name: str, err: ScanError, started: float, mrz_text: str = "") -> ScanResult:
	logger.error("Could not extract MRZ data from %s: %s", file_name or "<text>", err.message)
	return ScanResult(file_name, ERROR, error=err.to_dict(), mrz_text=mrz_text,
		elapsed=time.time() - started)


def scan_text(text: str, file_name: str = "", today: date | None = None,
		settings: Settings | None = None) -> ScanResult:
	"""
	Build a record from OCR text or a text-generation response.

	MRZ lines, when present, are decoded by position and any JSON in the
	same text only contributes the visual-zone fields. Otherwise the text
	goes through the response normalizer.
	"""
	started = time.time()
	lines = find_mrz_lines(text or "")
	block = _mrz_block(lines)
	if block is None and len(lines) >= 2 and not _has_json(text):
		# MRZ-shaped lines that fit no layout; let the decoder reject them
		block = lines
	try:
		if block is not None:
			decoder = MrzDecoder(today=today, settings=settings)
			record = decoder.decode(block, viz=_viz_fields(text))
		else:
			record = build_record(normalize_response(text), today=today, settings=settings)
	except ScanError as e:
		return _error(file_name, e, started, "\n".join(block or []))

	logger.info("Extracted document %s from %s", record.document_number, file_name or "<text>")
	return ScanResult(file_name, SUCCESS, record=record, mrz_text="\n".join(block or []),
		elapsed=time.time() - started)


def scan_image(image_bytes: bytes, file_name: str = "", today: date | None = None,
		settings: Settings | None = None) -> ScanResult:
	"""OCR the MRZ locally, then decode it."""
	started = time.time()
	try:
		mrz_text = read_mrz_text(image_bytes, settings=settings)
	except ScanError as e:
		return _error(file_name, e, started)

	result = scan_text(mrz_text, file_name, today=today, settings=settings)
	result.elapsed = time.time() - started
	return result


def scan_batch(items: Iterable[Tuple[str, Union[bytes, str]]], today: date | None = None,
		settings: Settings | None = None) -> List[ScanResult]:
	"""
	Scan (file_name, payload) pairs in order, one at a time.

	Bytes payloads are images; str payloads are already text.
	"""
	results = []
	for idx, (file_name, payload) in enumerate(items, 1):
		logger.info("Processing %d: %s", idx, file_name)
		if isinstance(payload, (bytes, bytearray)):
			results.append(scan_image(bytes(payload), file_name, today=today, settings=settings))
		else:
			results.append(scan_text(payload, file_name, today=today, settings=settings))
	ok = sum(1 for r in results if r.ok)
	logger.info("Batch finished: %d of %d documents extracted", ok, len(results))
	return results
