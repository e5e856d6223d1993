"""Tabular view of a batch, in the collaborator-facing CSV column order."""
import logging

import pandas as pd

from mrzscan.record import EXPORT_COLUMNS

logger = logging.getLogger(__name__)


def records_to_frame(results):
	"""
	One row per successful scan, columns in EXPORT_COLUMNS order.

	Failed scans are left out. Writing the file is up to the caller, e.g.
	``frame.to_csv(path, index=False, encoding="utf-8-sig")``.
	"""
	results = list(results)
	rows = [r.record.to_export_row(r.file_name) for r in results if r.ok and r.record is not None]
	skipped = len(results) - len(rows)
	if skipped:
		logger.info("Leaving %d failed scan(s) out of the export", skipped)
	return pd.DataFrame(rows, columns=list(EXPORT_COLUMNS))


def errors_to_frame(results):
	"""File name, error code and message for every failed scan."""
	rows = [
		{
			"File Name": r.file_name,
			"Error Code": (r.error or {}).get("error_code", ""),
			"Error": (r.error or {}).get("error", ""),
		}
		for r in results
		if not r.ok
	]
	return pd.DataFrame(rows, columns=["File Name", "Error Code", "Error"])
