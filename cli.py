from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

import uvicorn

from ruby_analyzer.config import load_settings, parse_log_level
from ruby_analyzer.errors import AnalysisError
from ruby_analyzer.extract import analyze_ruby_code


logger = logging.getLogger("ruby_analyzer.cli")


def _read_source(path: str) -> str:
	if path == "-":
		return sys.stdin.read()
	with open(path, "r", encoding="utf-8") as fh:
		return fh.read()


def cmd_analyze(args: argparse.Namespace) -> int:
	try:
		report = analyze_ruby_code(_read_source(args.path))
	except AnalysisError as e:
		print(f"{args.path}: {e.message}", file=sys.stderr)
		return 1
	print(json.dumps(report.model_dump(mode="json"), indent=2))
	return 0


def cmd_serve(args: argparse.Namespace) -> int:
	logger.info("Ruby analyzer is running on http://%s:%d", args.host, args.port)
	uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)
	return 0


def main(argv: Optional[List[str]] = None) -> int:
	settings = load_settings()

	parser = argparse.ArgumentParser(prog="ruby-analyzer")
	parser.add_argument("--log-level", type=parse_log_level, default=settings.log_level, help="Logging level (default: %(default)s)")
	sub = parser.add_subparsers(dest="cmd", required=True)

	pa = sub.add_parser("analyze", help="Analyze a Ruby file and print the report JSON")
	pa.add_argument("path", help="Path to a Ruby source file, or - for stdin")
	pa.set_defaults(func=cmd_analyze)

	ps = sub.add_parser("serve", help="Run the HTTP analysis service")
	ps.add_argument("--host", default=settings.host)
	ps.add_argument("--port", type=int, default=settings.port)
	ps.add_argument("--reload", action="store_true")
	ps.set_defaults(func=cmd_serve)

	args = parser.parse_args(argv)
	logging.basicConfig(
		level=args.log_level,
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
	return args.func(args)


if __name__ == "__main__":
	sys.exit(main())
