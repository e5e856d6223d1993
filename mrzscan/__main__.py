"""
Scan document photos or saved service responses from the command line.

	python -m mrzscan passport.jpg id_card.png response.txt
	python -m mrzscan --csv passports/*.jpg
	python -m mrzscan --prompt json

Images go through the local MRZ reader; .txt and .json files are treated as
text-generation responses. Results are printed as JSON, or with --csv as
CSV rows of the successful scans.
"""
import argparse
import json
import sys
from pathlib import Path

from mrzscan.config import configure_logging, load_settings
from mrzscan.export import records_to_frame
from mrzscan.pipeline import scan_batch
from mrzscan.prompts import build_extraction_prompt

TEXT_SUFFIXES = {".txt", ".json", ".csv"}


def _load(path: Path):
	if path.suffix.lower() in TEXT_SUFFIXES:
		return path.read_text(encoding="utf-8")
	return path.read_bytes()


def _summary(result):
	data = {
		"File Name": result.file_name,
		"Status": result.status,
		"Execution Time (seconds)": f"{result.elapsed:.2f}",
	}
	if result.ok:
		data.update(result.record.to_dict())
		if result.mrz_text:
			data["MRZ Text"] = result.mrz_text
	else:
		data["Error"] = result.error
	return data


def main(argv=None):
	parser = argparse.ArgumentParser(prog="mrzscan", description=__doc__.strip().splitlines()[0])
	parser.add_argument("files", nargs="*", type=Path, help="images or response text files")
	parser.add_argument("--csv", action="store_true", help="print successful records as CSV instead of JSON")
	parser.add_argument("--prompt", choices=("json", "csv"),
		help="print the extraction prompt for a vision model and exit")
	args = parser.parse_args(argv)

	if args.prompt:
		sys.stdout.write(build_extraction_prompt(args.prompt) + "\n")
		return 0
	if not args.files:
		parser.error("no files given")

	settings = load_settings()
	configure_logging(settings.log_level)

	items = [(path.name, _load(path)) for path in args.files]
	results = scan_batch(items, settings=settings)
	if args.csv:
		sys.stdout.write(records_to_frame(results).to_csv(index=False))
	else:
		json.dump([_summary(r) for r in results], sys.stdout, indent=2, ensure_ascii=False)
		sys.stdout.write("\n")
	return 0 if all(r.ok for r in results) else 1


if __name__ == "__main__":
	sys.exit(main())
