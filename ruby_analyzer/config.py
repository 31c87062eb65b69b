from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional


ENV_PREFIX = "RUBY_ANALYZER_"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4567
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
	host: str = DEFAULT_HOST
	port: int = DEFAULT_PORT
	cors_origins: List[str] = field(default_factory=lambda: ["*"])
	log_level: str = DEFAULT_LOG_LEVEL


def _parse_port(raw: str) -> int:
	try:
		port = int(raw)
	except ValueError:
		raise ValueError(f"Invalid port: {raw!r}") from None
	if not 0 < port < 65536:
		raise ValueError(f"Port out of range: {port}")
	return port


def parse_log_level(raw: str) -> str:
	level = raw.strip().upper()
	if not isinstance(logging.getLevelName(level), int):
		raise ValueError(f"Unknown log level: {raw!r}")
	return level


def _parse_origins(raw: str) -> List[str]:
	origins = [o.strip() for o in raw.split(",") if o.strip()]
	return origins or ["*"]


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
	"""Build settings from ``RUBY_ANALYZER_*`` environment variables.

	Unset variables fall back to the defaults; malformed values raise ``ValueError``.
	"""
	env = os.environ if environ is None else environ

	def get(name: str) -> Optional[str]:
		value = env.get(ENV_PREFIX + name)
		return value if value else None

	host = get("HOST") or DEFAULT_HOST
	port_raw = get("PORT")
	origins_raw = get("CORS_ORIGINS")
	level_raw = get("LOG_LEVEL")

	return Settings(
		host=host,
		port=_parse_port(port_raw) if port_raw else DEFAULT_PORT,
		cors_origins=_parse_origins(origins_raw) if origins_raw else ["*"],
		log_level=parse_log_level(level_raw) if level_raw else DEFAULT_LOG_LEVEL,
	)
