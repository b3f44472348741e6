from aurynx.compiler.directives import compile_directives
from aurynx.compiler.parser import parse_template
from aurynx.compiler.scope import (
    capture_variables,
    declarable,
    declared_variables,
    expression_variables,
    free_variables,
    used_variables,
)


def test_expression_variables():
    assert expression_variables("$a + count($b) - $c->d") == {"a", "b", "c"}


def test_single_quoted_strings_are_ignored():
    assert expression_variables("'$nope' . $yes") == {"yes"}


def test_double_quoted_strings_are_interpolated():
    assert expression_variables('"Hello $name, \\$literal"') == {"name"}


def test_static_properties_are_not_variables():
    assert expression_variables("Config::$value") == set()


def test_loop_variables_are_bound_in_body():
    nodes = parse_template("@each($users as $id => $user){{ $id }} {{ $user }} {{ $title }}@endeach")
    assert free_variables(nodes) == {"users", "title"}


def test_loop_variable_used_after_loop_is_free():
    nodes = parse_template("@each($xs as $x){{ $x }}@endeach{{ $x }}")
    assert free_variables(nodes) == {"xs", "x"}


def test_component_props_and_slots_count():
    nodes = parse_template('<x-card :post="$post" title="$static">{{ $body }}</x-card>')
    assert free_variables(nodes) == {"post", "body"}


def test_directive_rewrite_keeps_variables():
    nodes = compile_directives(parse_template("{{ $user.profile.name }}"))
    assert free_variables(nodes) == {"user"}


def test_used_variables_reads_fragments():
    assert used_variables("@if($a){{ $b }}@else{{{ $c }}}@endif") == {"a", "b", "c"}


def test_declarable_filters_reserved_names():
    names = {"slot", "__data", "__items", "this", "_GET", "GLOBALS", "zeta", "alpha"}
    assert declarable(names) == ["alpha", "zeta"]


def test_declared_variables_are_sorted():
    assert declared_variables("{{ $b }}{{ $a }}{{ $slot }}") == ["a", "b"]


def test_capture_variables_skip_uncapturable():
    nodes = parse_template("{{ $this->title }} {{ $_SERVER['x'] }} {{ $name }}")
    assert capture_variables(nodes) == ["name"]


def test_capture_variables_respect_bound():
    nodes = parse_template("{{ $item }} {{ $label }}")
    assert capture_variables(nodes, bound={"item"}) == ["label"]
