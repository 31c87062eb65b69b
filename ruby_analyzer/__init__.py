"""Ruby analyzer package for extracting the static shape of Ruby source code.

Modules:
- parsing.py: Ruby grammar loading and source parsing via tree-sitter.
- nodes.py: Tree walking, node-kind classification and location helpers.
- extract.py: Class, method and per-method feature extraction.
- model.py: Report records serialized as the analysis result.
- config.py: Environment-driven settings for the service.
- errors.py: Exceptions surfaced to callers.
"""

from .errors import AnalysisError, GrammarUnavailableError, RubySyntaxError
from .extract import analyze_ruby_code

__all__ = [
	"parsing",
	"nodes",
	"extract",
	"model",
	"config",
	"errors",
	"analyze_ruby_code",
	"AnalysisError",
	"GrammarUnavailableError",
	"RubySyntaxError",
]
