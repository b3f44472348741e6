import unittest

from aurynx.compiler.ast_nodes import (
    BooleanAttr,
    Comment,
    Component,
    Echo,
    HostCode,
    Loop,
    SlotSet,
    Text,
)
from aurynx.compiler.directives import (
    boolean_fragment,
    branch_header,
    compile_directives,
    existence_header,
    existence_test,
    loop_header,
)
from aurynx.compiler.parser import parse_template


class TestCompileDirectives(unittest.TestCase):
    def test_echo_expressions_are_rewritten(self):
        nodes = compile_directives(parse_template("{{ $user.name }}{{{ $post.body }}}"))
        self.assertEqual(
            nodes,
            (
                Echo("data_get($user, 'name')"),
                Echo("data_get($post, 'body')", escaped=False),
            ),
        )

    def test_conditions_and_collections_are_rewritten(self):
        (conditional,) = compile_directives(parse_template("@if($a.ok)x@elseif($b.ok)y@else z@endif"))
        conditions = [branch.condition for branch in conditional.branches]
        self.assertEqual(conditions, ["data_get($a, 'ok')", "data_get($b, 'ok')", None])

        (loop,) = compile_directives(parse_template("@each($user.posts as $post){{ $post.title }}@endeach"))
        self.assertEqual(
            loop,
            Loop(
                "data_get($user, 'posts')",
                "post",
                body=(Echo("data_get($post, 'title')"),),
            ),
        )

    def test_existence_and_boolean_attributes(self):
        nodes = compile_directives(parse_template("@has($u.email)ok@endhas@checked($form.on)"))
        self.assertEqual(nodes[0].expression, "data_get($u, 'email')")
        self.assertEqual(nodes[1], BooleanAttr("checked", "data_get($form, 'on')"))

    def test_component_props_and_slots(self):
        (component,) = compile_directives(
            parse_template(
                '<x-card title="$a.b" :post="$page.post"><x-slot:head>{{ $h.t }}</x-slot>{{ $d.t }}</x-card>'
            )
        )
        self.assertEqual(
            component,
            Component(
                "card",
                {"title": "$a.b", ":post": "data_get($page, 'post')"},
                SlotSet(
                    default=(Echo("data_get($d, 't')"),),
                    named={"head": (Echo("data_get($h, 't')"),)},
                ),
            ),
        )

    def test_text_comments_and_host_code_untouched(self):
        source = "$user.name {{-- $user.name --}}<?php echo $user.name; ?>"
        nodes = compile_directives(parse_template(source))
        self.assertEqual(
            nodes,
            (
                Text("$user.name "),
                Comment("$user.name"),
                HostCode("echo $user.name;"),
            ),
        )


def test_branch_headers():
    assert branch_header(0, "$a") == "if ($a)"
    assert branch_header(1, "$b") == "elseif ($b)"
    assert branch_header(2, None) == "else"


def test_loop_headers():
    assert loop_header(Loop("$users", "user")) == "foreach ($users as $user)"
    assert loop_header(Loop("$map", "v", key="k")) == "foreach ($map as $k => $v)"


def test_existence_and_boolean_fragments():
    assert existence_test("$x") == "!empty($x)"
    assert existence_header("$x") == "if (!empty($x))"
    assert boolean_fragment("disabled") == " disabled"
