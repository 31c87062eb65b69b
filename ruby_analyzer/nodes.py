from __future__ import annotations

from enum import Enum
from typing import Callable, Optional, TypeVar

from tree_sitter import Node


A = TypeVar("A")

SCOPE_SEPARATOR = "::"


class NodeKind(Enum):
	CLASS = "class"
	METHOD = "method"
	INSTANCE_ASSIGN = "instance_assign"
	LOCAL_ASSIGN = "local_assign"
	CALL = "call"
	CONDITIONAL = "conditional"
	PARAMETER = "parameter"
	# A receiverless identifier: a local read, or a call when no such local is bound.
	BARE_NAME = "bare_name"
	OTHER = "other"


CONDITIONAL_TYPES = frozenset(
	{"if", "unless", "elsif", "if_modifier", "unless_modifier", "conditional"}
)

# Binary operators Ruby dispatches as method calls; `&&`, `||`, `and` and `or`
# are control flow and are not among them.
METHOD_OPERATORS = frozenset(
	{
		"+", "-", "*", "/", "%", "**",
		"==", "!=", "<", "<=", ">", ">=", "<=>", "===", "=~", "!~",
		"<<", ">>", "&", "|", "^",
	}
)

# Unary operator token -> the method Ruby sends.
UNARY_SELECTORS = {"!": "!", "not": "!", "~": "~", "-": "-@", "+": "+@"}

_NUMERIC_TYPES = frozenset({"integer", "float", "rational", "complex"})

# Parameter lists whose direct identifiers are parameter names.
_PARAMETER_LIST_TYPES = frozenset(
	{"method_parameters", "block_parameters", "lambda_parameters", "destructured_parameter"}
)

# Parameters whose `name` field is the parameter name.
_NAMED_PARAMETER_TYPES = frozenset(
	{"optional_parameter", "keyword_parameter", "splat_parameter", "hash_splat_parameter", "block_parameter"}
)

# Nodes whose `left` field is written to.
_ASSIGNMENT_TYPES = frozenset({"assignment", "operator_assignment"})

# Nodes every named child of which is written to: `a, @b = ...`, `*rest = ...`,
# `(a, b), c = ...` and `rescue => e`.
_TARGET_LIST_TYPES = frozenset(
	{"left_assignment_list", "destructured_left_assignment", "rest_assignment", "exception_variable"}
)


def _is_tree_node(value: object) -> bool:
	return getattr(value, "is_named", False) is True


def walk(root: object, visit: Callable[[Node, A], None], accumulator: A) -> None:
	"""Visit ``root`` and every named descendant in pre-order, left to right.

	Anonymous tokens (keywords, punctuation) and non-node values are leaves and
	are skipped. The walker keeps no state; ``visit`` records what it needs into
	``accumulator``.
	"""
	if not _is_tree_node(root):
		return
	stack = [root]
	while stack:
		node = stack.pop()
		visit(node, accumulator)
		children = getattr(node, "named_children", None) or []
		stack.extend(child for child in reversed(children) if _is_tree_node(child))


def node_text(source: bytes, node: Node) -> str:
	return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def line_of(node: Optional[Node]) -> Optional[int]:
	"""1-based start line of ``node``, or None when it has no usable location."""
	if node is None:
		return None
	try:
		row = node.start_point[0]
	except (AttributeError, IndexError, TypeError):
		return None
	if not isinstance(row, int) or row < 0:
		return None
	return row + 1


def child_field(node: Node, name: str) -> Optional[Node]:
	try:
		return node.child_by_field_name(name)
	except AttributeError:
		return None


def is_assignment_target(node: Node) -> bool:
	parent = getattr(node, "parent", None)
	if parent is None:
		return False
	if parent.type in _ASSIGNMENT_TYPES:
		return child_field(parent, "left") == node
	if parent.type == "for":
		return child_field(parent, "pattern") == node
	return parent.type in _TARGET_LIST_TYPES


def is_plain_write(node: Node) -> bool:
	"""True for the target of `=` or a multiple assignment, not of `+=` and friends."""
	parent = getattr(node, "parent", None)
	return is_assignment_target(node) and parent.type != "operator_assignment"


def is_parameter(node: Node) -> bool:
	parent = getattr(node, "parent", None)
	if parent is None:
		return False
	if parent.type in _PARAMETER_LIST_TYPES:
		return True
	if parent.type in _NAMED_PARAMETER_TYPES:
		return child_field(parent, "name") == node
	return False


def is_name_position(node: Node) -> bool:
	"""Identifiers naming a method: definitions, selectors, `alias` and `undef`."""
	parent = getattr(node, "parent", None)
	if parent is None:
		return False
	if parent.type in ("method", "singleton_method"):
		return child_field(parent, "name") == node
	if parent.type == "call":
		return child_field(parent, "method") == node
	return parent.type in ("alias", "undef", "setter")


def operator_token(node: Node) -> Optional[Node]:
	return child_field(node, "operator")


def _is_operator_call(node: Node) -> bool:
	operator = operator_token(node)
	if operator is None:
		return False
	if node.type == "binary":
		return operator.type in METHOD_OPERATORS
	operand = child_field(node, "operand")
	if operand is not None and operand.type in _NUMERIC_TYPES:
		# `-1` is a literal, not a call.
		return False
	return operator.type in UNARY_SELECTORS


def classify(node: Node) -> NodeKind:
	kind = node.type
	if kind == "class":
		return NodeKind.CLASS
	if kind == "method":
		return NodeKind.METHOD
	if kind in ("call", "element_reference"):
		return NodeKind.CALL
	if kind in ("binary", "unary"):
		return NodeKind.CALL if _is_operator_call(node) else NodeKind.OTHER
	if kind in CONDITIONAL_TYPES:
		return NodeKind.CONDITIONAL
	if kind == "instance_variable" and is_assignment_target(node):
		return NodeKind.INSTANCE_ASSIGN
	if kind == "identifier":
		if is_assignment_target(node):
			return NodeKind.LOCAL_ASSIGN
		if is_parameter(node):
			return NodeKind.PARAMETER
		if is_name_position(node):
			return NodeKind.OTHER
		return NodeKind.BARE_NAME
	return NodeKind.OTHER


def const_name(source: bytes, node: Optional[Node]) -> Optional[str]:
	"""Rebuild a constant path such as ``A::B::C`` from its left-nested chain.

	Returns None for anything that is not a constant or constant path. A
	top-level path (``::Foo``) keeps its empty leading segment.
	"""
	if node is None or node.type not in ("constant", "scope_resolution"):
		return None
	parts = []
	cursor: Optional[Node] = node
	while cursor is not None:
		if cursor.type == "scope_resolution":
			name = child_field(cursor, "name")
			parts.append(node_text(source, name) if name is not None else "")
			cursor = child_field(cursor, "scope")
			if cursor is None:
				parts.append("")
		else:
			parts.append(node_text(source, cursor))
			cursor = None
	return SCOPE_SEPARATOR.join(reversed(parts))
