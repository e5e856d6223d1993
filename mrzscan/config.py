from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
	log_level: str = "INFO"
	tessdata_dir: Path = Path("./custom/fast")
	min_birth_year: int = 1940
	expiry_past_years: int = 10


def _int_env(name: str, default: int) -> int:
	raw = os.getenv(name)
	if raw is None or not raw.strip():
		return default
	try:
		return int(raw)
	except ValueError:
		raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def load_settings() -> Settings:
	load_dotenv()
	return Settings(
		log_level=os.getenv("MRZSCAN_LOG_LEVEL", "INFO").upper(),
		tessdata_dir=Path(os.getenv("MRZSCAN_TESSDATA_DIR", "./custom/fast")).resolve(),
		min_birth_year=_int_env("MRZSCAN_MIN_BIRTH_YEAR", 1940),
		expiry_past_years=_int_env("MRZSCAN_EXPIRY_PAST_YEARS", 10),
	)


def configure_logging(level: str = "INFO") -> None:
	logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
