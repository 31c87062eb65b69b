from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from tree_sitter import Language, Node, Parser, Tree

from .errors import GrammarUnavailableError, RubySyntaxError
from .nodes import is_name_position, is_parameter, node_text, walk


logger = logging.getLogger(__name__)

# Keywords that only close or continue a construct. The grammar recovers a
# stray one (an unbalanced `end`) as a plain identifier without an error node.
CLAUSE_KEYWORDS = frozenset(
	{"end", "else", "elsif", "when", "in", "rescue", "ensure", "then", "do"}
)


@dataclass(frozen=True)
class ParsedSource:
	"""A parsed tree together with the exact bytes its offsets refer to."""

	tree: Tree
	source: bytes

	@property
	def root(self) -> Node:
		return self.tree.root_node


@lru_cache(maxsize=1)
def load_ruby_language() -> Language:
	"""Load the compiled Ruby grammar once; ``Language`` objects are immutable."""
	try:
		import tree_sitter_ruby
	except ImportError as e:
		raise GrammarUnavailableError(
			"Could not load the Ruby grammar. Install it with: pip install tree-sitter-ruby"
		) from e
	language = Language(tree_sitter_ruby.language())
	logger.info("Loaded tree-sitter grammar: ruby")
	return language


def _first_error(root: Node) -> Optional[Node]:
	# Missing tokens are anonymous, so every child is inspected, not only named ones.
	stack = [root]
	while stack:
		node = stack.pop()
		if node.type == "ERROR" or node.is_missing:
			return node
		if node.has_error:
			stack.extend(reversed(node.children))
	return None


@dataclass
class _KeywordScan:
	source: bytes
	found: List[Node] = field(default_factory=list)


def _note_stray_keyword(node: Node, scan: _KeywordScan) -> None:
	if scan.found or node.type != "identifier":
		return
	if is_name_position(node) or is_parameter(node):
		return
	if node_text(scan.source, node) in CLAUSE_KEYWORDS:
		scan.found.append(node)


def _first_stray_keyword(root: Node, source: bytes) -> Optional[Node]:
	scan = _KeywordScan(source=source)
	walk(root, _note_stray_keyword, scan)
	return scan.found[0] if scan.found else None


def _describe_error(node: Optional[Node], source: bytes) -> RubySyntaxError:
	if node is None:
		return RubySyntaxError("syntax error")
	line = node.start_point[0] + 1
	column = node.start_point[1] + 1
	if node.is_missing:
		message = f"syntax error, missing '{node.type}' at line {line}, column {column}"
	else:
		snippet = node_text(source, node).strip().partition("\n")[0].strip()
		if snippet:
			message = f"syntax error, unexpected '{snippet}' at line {line}, column {column}"
		else:
			message = f"syntax error at line {line}, column {column}"
	return RubySyntaxError(message, line=line, column=column)


def parse_ruby(code: str) -> ParsedSource:
	"""Parse Ruby source text into a tree.

	tree-sitter always produces a tree, recovering from bad input with ``ERROR``
	and missing nodes, or by reading an unbalanced ``end`` as an identifier;
	such trees are rejected here with ``RubySyntaxError``.
	"""
	source = code.encode("utf-8")
	parser = Parser(load_ruby_language())
	tree = parser.parse(source)
	if tree.root_node.has_error:
		offending = _first_error(tree.root_node)
	else:
		offending = _first_stray_keyword(tree.root_node, source)
	if tree.root_node.has_error or offending is not None:
		error = _describe_error(offending, source)
		logger.debug("Rejected Ruby source: %s", error.message)
		raise error
	return ParsedSource(tree=tree, source=source)
