from __future__ import annotations

from typing import Optional


class AnalysisError(Exception):
	"""Base class for failures that abort an analysis."""

	def __init__(self, message: str):
		super().__init__(message)
		self.message = message


class GrammarUnavailableError(AnalysisError):
	pass


class RubySyntaxError(AnalysisError):
	"""The source text could not be parsed into a complete tree."""

	def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
		super().__init__(message)
		self.line = line
		self.column = column
