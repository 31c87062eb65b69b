"""Structural extraction over a parsed Ruby tree.

Discovery is unscoped: a class declared inside a method, or a
method declared inside another method, is still found and reported on its
own. A method nested in another method therefore also contributes its
features to the enclosing method's lists.

Arguments are listed by each parameter's own name; anonymous `*`, `**`, `&`
and `...` give an empty string, and a destructured parameter `(a, b)` is
listed by its source text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set, Tuple

from tree_sitter import Node

from .model import (
	AnalysisReport,
	ClassInfo,
	ClassReport,
	ConditionalRef,
	InstanceVarRef,
	LocalVarRef,
	MethodCallRef,
	MethodInfo,
	TopLevelInfo,
	TopLevelReport,
)
from .nodes import (
	UNARY_SELECTORS,
	NodeKind,
	child_field,
	classify,
	const_name,
	is_plain_write,
	line_of,
	node_text,
	operator_token,
	walk,
)
from .parsing import parse_ruby


logger = logging.getLogger(__name__)

# Ruby dispatches `callable.(args)` to `call`.
IMPLICIT_CALL_SELECTOR = "call"


@dataclass
class MethodFeatures:
	source: bytes
	instance_variables: List[InstanceVarRef] = field(default_factory=list)
	local_variables: List[LocalVarRef] = field(default_factory=list)
	method_calls: List[MethodCallRef] = field(default_factory=list)
	conditionals: List[ConditionalRef] = field(default_factory=list)
	# Parameters and locals assigned so far; a bare name outside this set is a call.
	bound: Set[str] = field(default_factory=set)


def _collect_kind(kind: NodeKind) -> Callable[[Node, List[Node]], None]:
	def collect(node: Node, found: List[Node]) -> None:
		if classify(node) is kind:
			found.append(node)

	return collect


_collect_classes = _collect_kind(NodeKind.CLASS)
_collect_methods = _collect_kind(NodeKind.METHOD)


def find_class_nodes(root: Node) -> List[Node]:
	found: List[Node] = []
	walk(root, _collect_classes, found)
	return found


def find_method_nodes(scope: Node) -> List[Node]:
	found: List[Node] = []
	walk(scope, _collect_methods, found)
	return found


def call_selector(node: Node, source: bytes) -> Tuple[str, Optional[Node]]:
	"""The method a call-kind node sends, and the token locating it.

	Operators send themselves (unary minus sends ``-@``), indexing sends ``[]``
	and writes through a selector send its ``=`` form (``x=``, ``[]=``).
	"""
	if node.type == "binary":
		operator = operator_token(node)
		return operator.type, operator
	if node.type == "unary":
		operator = operator_token(node)
		return UNARY_SELECTORS[operator.type], operator
	suffix = "=" if is_plain_write(node) else ""
	if node.type == "element_reference":
		bracket = next((c for c in node.children if c.type == "["), None)
		return "[]" + suffix, bracket
	selector = child_field(node, "method")
	if selector is None:
		return IMPLICIT_CALL_SELECTOR, None
	return node_text(source, selector) + suffix, selector


def _record_feature(node: Node, features: MethodFeatures) -> None:
	kind = classify(node)
	if kind is NodeKind.INSTANCE_ASSIGN:
		features.instance_variables.append(
			InstanceVarRef(name=node_text(features.source, node), line_number=line_of(node))
		)
	elif kind is NodeKind.LOCAL_ASSIGN:
		name = node_text(features.source, node)
		features.bound.add(name)
		features.local_variables.append(LocalVarRef(name=name, line_number=line_of(node)))
	elif kind is NodeKind.PARAMETER:
		features.bound.add(node_text(features.source, node))
	elif kind is NodeKind.BARE_NAME:
		name = node_text(features.source, node)
		if name not in features.bound:
			features.method_calls.append(MethodCallRef(name=name, line_number=line_of(node)))
	elif kind is NodeKind.CALL:
		name, selector = call_selector(node, features.source)
		features.method_calls.append(MethodCallRef(name=name, line_number=line_of(selector)))
	elif kind is NodeKind.CONDITIONAL:
		# Multi-line conditions are truncated to their first physical line.
		first_line = node_text(features.source, node).partition("\n")[0]
		features.conditionals.append(
			ConditionalRef(condition=first_line.strip(), line_number=line_of(node))
		)


def scan_features(method_node: Node, source: bytes) -> MethodFeatures:
	features = MethodFeatures(source=source)
	walk(method_node, _record_feature, features)
	return features


def _parameter_name(source: bytes, param: Node) -> str:
	if param.type in ("identifier", "destructured_parameter"):
		return node_text(source, param)
	name = child_field(param, "name")
	if name is not None:
		return node_text(source, name)
	# Anonymous `*`, `**`, `&` and `...` have no name.
	return ""


def method_arguments(method_node: Node, source: bytes) -> List[str]:
	params = child_field(method_node, "parameters")
	if params is None:
		return []
	return [
		_parameter_name(source, p)
		for p in params.named_children
		if p.type != "comment"
	]


def build_method_info(method_node: Node, source: bytes) -> MethodInfo:
	name_node = child_field(method_node, "name")
	features = scan_features(method_node, source)
	return MethodInfo(
		name=node_text(source, name_node) if name_node is not None else "",
		arguments=method_arguments(method_node, source),
		line_number=line_of(name_node),
		instance_variables=features.instance_variables,
		local_variables=features.local_variables,
		method_calls=features.method_calls,
		conditionals=features.conditionals,
	)


def extract_methods(scope: Node, source: bytes) -> List[MethodInfo]:
	return [build_method_info(m, source) for m in find_method_nodes(scope)]


def _superclass_name(class_node: Node, source: bytes) -> Optional[str]:
	superclass = child_field(class_node, "superclass")
	if superclass is None:
		return None
	expressions = [c for c in superclass.named_children if c.type != "comment"]
	if not expressions:
		return None
	return const_name(source, expressions[0])


def build_class_info(class_node: Node, source: bytes) -> ClassInfo:
	name_node = child_field(class_node, "name")
	class_name = const_name(source, name_node)
	if class_name is None:
		class_name = node_text(source, name_node) if name_node is not None else ""
	return ClassInfo(
		class_name=class_name,
		inherits_from=_superclass_name(class_node, source),
		line_number=line_of(name_node),
		methods=extract_methods(class_node, source),
	)


def analyze_tree(root: Node, source: bytes) -> AnalysisReport:
	"""Build the report for an already-parsed program.

	The mode is decided once for the whole tree: class mode when any class
	declaration exists anywhere, top-level mode otherwise.
	"""
	class_nodes = find_class_nodes(root)
	if not class_nodes:
		methods = extract_methods(root, source)
		logger.debug("No classes found; analyzed %d top-level methods", len(methods))
		return TopLevelReport(top_level=TopLevelInfo(methods=methods))

	classes = [build_class_info(c, source) for c in class_nodes]
	logger.debug("Analyzed %d classes", len(classes))
	return ClassReport(classes=classes)


def analyze_ruby_code(code: str) -> AnalysisReport:
	parsed = parse_ruby(code)
	return analyze_tree(parsed.root, parsed.source)
