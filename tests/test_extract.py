from textwrap import dedent

from ruby_analyzer.extract import analyze_ruby_code
from ruby_analyzer.model import ClassReport, TopLevelReport


def _only_method(report):
	assert len(report.classes) == 1
	assert len(report.classes[0].methods) == 1
	return report.classes[0].methods[0]


def test_class_with_method_features():
	report = analyze_ruby_code("class Foo; def bar(x); @a = 1; if x; puts x; end; end; end")
	assert isinstance(report, ClassReport)
	cls = report.classes[0]
	assert cls.class_name == "Foo"
	assert cls.inherits_from is None
	assert cls.line_number == 1

	method = _only_method(report)
	assert method.name == "bar"
	assert method.arguments == ["x"]
	assert method.line_number == 1
	assert [(v.name, v.line_number) for v in method.instance_variables] == [("@a", 1)]
	assert method.local_variables == []
	assert [c.name for c in method.method_calls] == ["puts"]
	assert len(method.conditionals) == 1
	assert method.conditionals[0].condition.startswith("if x")


def test_top_level_mode_without_classes():
	report = analyze_ruby_code("def greet(name); local = name; puts local; end")
	assert isinstance(report, TopLevelReport)
	methods = report.top_level.methods
	assert [m.name for m in methods] == ["greet"]
	assert methods[0].arguments == ["name"]
	assert [v.name for v in methods[0].local_variables] == ["local"]
	assert [c.name for c in methods[0].method_calls] == ["puts"]


def test_superclass_and_empty_body():
	report = analyze_ruby_code("class Child < Parent; end")
	cls = report.classes[0]
	assert cls.class_name == "Child"
	assert cls.inherits_from == "Parent"
	assert cls.methods == []


def test_namespaced_names_are_rebuilt_outer_to_inner():
	report = analyze_ruby_code("class Outer::Inner::Leaf < Base::Thing; end")
	cls = report.classes[0]
	assert cls.class_name == "Outer::Inner::Leaf"
	assert cls.inherits_from == "Base::Thing"


def test_top_level_constant_path_keeps_leading_separator():
	report = analyze_ruby_code("class ::Rooted; end")
	assert report.classes[0].class_name == "::Rooted"


def test_non_constant_superclass_is_absent():
	report = analyze_ruby_code("class Point < Struct.new(:x, :y); end")
	cls = report.classes[0]
	assert cls.class_name == "Point"
	assert cls.inherits_from is None


def test_any_class_anywhere_selects_class_mode():
	code = dedent(
		"""
		def helper; end

		if enabled
		  class Built
		    def ready; end
		  end
		end
		"""
	)
	report = analyze_ruby_code(code)
	assert isinstance(report, ClassReport)
	assert [c.class_name for c in report.classes] == ["Built"]
	# Methods outside every class are not reported in class mode.
	assert [m.name for m in report.classes[0].methods] == ["ready"]


def test_modules_do_not_count_as_classes():
	report = analyze_ruby_code("module Helpers; def help; end; end")
	assert isinstance(report, TopLevelReport)
	assert [m.name for m in report.top_level.methods] == ["help"]


def test_empty_source_is_an_empty_top_level_report():
	report = analyze_ruby_code("")
	assert isinstance(report, TopLevelReport)
	assert report.top_level.methods == []


def test_nested_classes_are_reported_separately_and_unscoped():
	code = dedent(
		"""
		class Outer
		  def a; end
		  class Inner
		    def b; end
		  end
		end
		"""
	)
	report = analyze_ruby_code(code)
	assert [c.class_name for c in report.classes] == ["Outer", "Inner"]
	assert [m.name for m in report.classes[0].methods] == ["a", "b"]
	assert [m.name for m in report.classes[1].methods] == ["b"]
	assert report.classes[1].line_number == 4


def test_nested_method_features_count_in_both_methods():
	code = dedent(
		"""
		def outer
		  def inner
		    @x = 1
		  end
		end
		"""
	)
	methods = analyze_ruby_code(code).top_level.methods
	assert [m.name for m in methods] == ["outer", "inner"]
	assert [v.name for v in methods[0].instance_variables] == ["@x"]
	assert [v.name for v in methods[1].instance_variables] == ["@x"]


def test_argument_names_ignore_defaults():
	code = "def build(a, b = 2, *rest, key:, opt: 1, **opts, &blk); end"
	method = analyze_ruby_code(code).top_level.methods[0]
	assert method.arguments == ["a", "b", "rest", "key", "opt", "opts", "blk"]


def test_arguments_without_parentheses():
	method = analyze_ruby_code("def add x, y\n  x\nend").top_level.methods[0]
	assert method.arguments == ["x", "y"]


def test_duplicate_underscore_arguments_are_kept():
	method = analyze_ruby_code("def skip(_, _); end").top_level.methods[0]
	assert method.arguments == ["_", "_"]


def test_setter_and_predicate_method_names():
	code = dedent(
		"""
		class Account
		  def balance=(value); @balance = value; end
		  def empty?; end
		end
		"""
	)
	methods = analyze_ruby_code(code).classes[0].methods
	assert [m.name for m in methods] == ["balance=", "empty?"]
	assert [m.line_number for m in methods] == [3, 4]


def test_assignment_variants_are_recorded_in_order():
	code = dedent(
		"""
		def setup
		  @count = 0
		  @count += 1
		  total ||= 5
		  @a, b = 1, 2
		  first, *others = [1, 2, 3]
		end
		"""
	)
	method = analyze_ruby_code(code).top_level.methods[0]
	assert [(v.name, v.line_number) for v in method.instance_variables] == [
		("@count", 3),
		("@count", 4),
		("@a", 6),
	]
	assert [(v.name, v.line_number) for v in method.local_variables] == [
		("total", 5),
		("b", 6),
		("first", 7),
		("others", 7),
	]


def test_reads_are_not_assignments():
	code = dedent(
		"""
		def show
		  value = @cached
		  log(value)
		end
		"""
	)
	method = analyze_ruby_code(code).top_level.methods[0]
	assert method.instance_variables == []
	assert [v.name for v in method.local_variables] == ["value"]


def test_loop_and_rescue_bindings_are_locals():
	code = dedent(
		"""
		def each_item(items)
		  for item in items
		    handle(item)
		  end
		rescue StandardError => err
		  report(err)
		end
		"""
	)
	method = analyze_ruby_code(code).top_level.methods[0]
	assert [(v.name, v.line_number) for v in method.local_variables] == [("item", 3), ("err", 6)]


def test_call_names_are_selectors_not_receivers():
	code = dedent(
		"""
		def load
		  Service.build.fetch(:id)
		end
		"""
	)
	method = analyze_ruby_code(code).top_level.methods[0]
	# The outer call encloses its receiver, so it is encountered first.
	assert [(c.name, c.line_number) for c in method.method_calls] == [("fetch", 3), ("build", 3)]


def test_call_line_is_the_selector_line():
	code = dedent(
		"""
		def notify
		  logger.
		    info("done")
		end
		"""
	)
	method = analyze_ruby_code(code).top_level.methods[0]
	# A bare receiver with no local of that name is itself a call.
	assert [(c.name, c.line_number) for c in method.method_calls] == [("info", 4), ("logger", 3)]


def test_multiline_condition_keeps_first_line():
	code = dedent(
		"""
		def check(a, b)
		  if a &&
		     b
		    go
		  end
		end
		"""
	)
	method = analyze_ruby_code(code).top_level.methods[0]
	assert [(c.condition, c.line_number) for c in method.conditionals] == [("if a &&", 3)]


def test_all_branch_forms_are_conditionals():
	code = dedent(
		"""
		def decide(a)
		  if a > 1
		    one
		  elsif a < 0
		    two
		  end
		  return 3 unless ready
		  a ? four : five
		end
		"""
	)
	method = analyze_ruby_code(code).top_level.methods[0]
	assert [(c.condition, c.line_number) for c in method.conditionals] == [
		("if a > 1", 3),
		("elsif a < 0", 5),
		("return 3 unless ready", 8),
		("a ? four : five", 9),
	]


def test_features_are_in_source_order():
	code = dedent(
		"""
		class Worker
		  def run(job)
		    @job = job
		    started = now
		    prepare(job)
		    if started
		      @state = :running
		      execute(job)
		    end
		    finished = true
		  end
		end
		"""
	)
	method = _only_method(analyze_ruby_code(code))
	assert [v.line_number for v in method.instance_variables] == [4, 8]
	assert [v.line_number for v in method.local_variables] == [5, 11]
	assert [c.name for c in method.method_calls] == ["now", "prepare", "execute"]
	assert [c.line_number for c in method.method_calls] == [5, 6, 9]
	assert [c.line_number for c in method.conditionals] == [7]


def test_report_serializes_with_expected_keys():
	report = analyze_ruby_code("class Foo; def bar(x); @a = 1; end; end")
	payload = report.model_dump(mode="json")
	assert set(payload) == {"classes"}
	cls = payload["classes"][0]
	assert set(cls) == {"class_name", "inherits_from", "line_number", "methods"}
	assert set(cls["methods"][0]) == {
		"name",
		"arguments",
		"line_number",
		"instance_variables",
		"local_variables",
		"method_calls",
		"conditionals",
	}

	top = analyze_ruby_code("def f; end").model_dump(mode="json")
	assert set(top) == {"top_level"}
	assert top["top_level"]["methods"][0]["name"] == "f"


def test_operators_and_indexing_are_calls():
	code = dedent(
		"""
		def compare(a, b)
		  a + b
		  a[0]
		  a == b
		  a && b
		end
		"""
	)
	method = analyze_ruby_code(code).top_level.methods[0]
	# `&&` is control flow, not a method send.
	assert [(c.name, c.line_number) for c in method.method_calls] == [("+", 3), ("[]", 4), ("==", 5)]


def test_writes_through_selectors_send_setters():
	code = dedent(
		"""
		class Cart
		  def add(v)
		    self.total = 1
		    @items[0] = v
		    self.count += 1
		  end
		end
		"""
	)
	method = _only_method(analyze_ruby_code(code))
	assert [(c.name, c.line_number) for c in method.method_calls] == [
		("total=", 4),
		("[]=", 5),
		("count", 6),
	]
	assert method.instance_variables == []
	assert method.local_variables == []


def test_unbound_bare_names_are_calls():
	code = dedent(
		"""
		def tick(job)
		  started = now
		  go
		  started
		  job
		  !started
		  -job
		  -1
		end
		"""
	)
	method = analyze_ruby_code(code).top_level.methods[0]
	assert [(c.name, c.line_number) for c in method.method_calls] == [
		("now", 3),
		("go", 4),
		("!", 7),
		("-@", 8),
	]


def test_block_parameters_are_not_calls():
	code = dedent(
		"""
		def show_all(items)
		  items.each { |item| show(item) }
		end
		"""
	)
	method = analyze_ruby_code(code).top_level.methods[0]
	assert [(c.name, c.line_number) for c in method.method_calls] == [("each", 3), ("show", 3)]


def test_anonymous_parameters_are_empty_names():
	methods = analyze_ruby_code("def fwd(*, **); end\ndef pass(...); end\n").top_level.methods
	assert methods[0].arguments == ["", ""]
	assert methods[1].arguments == [""]
