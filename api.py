from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ruby_analyzer.config import Settings, load_settings
from ruby_analyzer.errors import RubySyntaxError
from ruby_analyzer.extract import analyze_ruby_code
from ruby_analyzer.model import AnalyzeRequest, AnalyzeResponse


logger = logging.getLogger(__name__)


def _failure(status_code: int, message: str) -> JSONResponse:
	body = AnalyzeResponse(success=False, error=message)
	return JSONResponse(status_code=status_code, content=body.model_dump(mode="json", exclude_unset=True))


def _describe_validation_error(exc: RequestValidationError) -> str:
	parts = []
	for err in exc.errors():
		loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
		msg = err.get("msg", "invalid value")
		parts.append(f"{loc}: {msg}" if loc else msg)
	return "Invalid request: " + ("; ".join(parts) or "malformed body")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
	settings = settings or load_settings()
	app = FastAPI(title="Ruby Analyzer")
	app.state.settings = settings

	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origins,
		allow_methods=["POST"],
		allow_headers=["*"],
	)

	@app.exception_handler(RequestValidationError)
	async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
		return _failure(400, _describe_validation_error(exc))

	@app.get("/")
	def health() -> dict:
		return {"message": "Ruby Analyzer API is running."}

	@app.post("/analyze", response_model=AnalyzeResponse)
	def analyze(req: AnalyzeRequest) -> JSONResponse:
		try:
			report = analyze_ruby_code(req.code)
		except RubySyntaxError as e:
			return _failure(400, e.message)
		except Exception as e:
			logger.exception("Analysis failed")
			return _failure(500, str(e) or e.__class__.__name__)
		body = AnalyzeResponse(success=True, result=report)
		return JSONResponse(content=body.model_dump(mode="json", exclude_unset=True))

	return app


app = create_app()
