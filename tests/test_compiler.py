import logging
import unittest

from aurynx import CompileOptions, compile

HEADER = "<?php\n\ndeclare(strict_types=1);\n\n"
USER_NAME = "data_get($user, 'name')"


def escaped(expression):
    return f"htmlspecialchars((string) {expression}, ENT_QUOTES, 'UTF-8')"


class TestCompile(unittest.TestCase):
    def test_empty_template(self):
        self.assertEqual(compile(""), HEADER + "return static fn(): string => '';\n")

    def test_echo_with_data(self):
        self.assertEqual(
            compile("Hello, {{ $name }}"),
            HEADER
            + "return static function (array $__data): string {\n"
            "  $name = $__data['name'] ?? null;\n"
            "\n"
            f"  return 'Hello, ' . {escaped('$name')};\n"
            "};\n",
        )

    def test_self_closing_component(self):
        self.assertEqual(
            compile("<x-alert />"),
            HEADER
            + "return static fn(): string => "
            "component(componentClass: App\\View\\Components\\Alert::class);\n",
        )

    def test_component_props(self):
        self.assertEqual(
            compile('<x-card title="Static" :post="$post" />'),
            HEADER
            + "return static function (array $__data): string {\n"
            "  $post = $__data['post'] ?? null;\n"
            "\n"
            "  return component(componentClass: App\\View\\Components\\Card::class, "
            "props: ['title' => 'Static', 'post' => $post]);\n"
            "};\n",
        )

    def test_loop_to_map(self):
        self.assertEqual(
            compile("@each($users as $user) {{ $user.name }} @endeach"),
            HEADER
            + "return static function (array $__data): string {\n"
            "  $users = $__data['users'] ?? null;\n"
            "\n"
            "  $__items = iterator_to_array($users ?: [], false);\n"
            "\n"
            "  return implode('', array_map(static fn(mixed $user): string => "
            f"' ' . {escaped(USER_NAME)} . ' ', $__items));\n"
            "};\n",
        )

    def test_named_and_default_slots(self):
        source = (
            "<x-alert><x-slot:title>Server Error</x-slot>"
            "<strong>Whoops!</strong> Something went wrong!</x-alert>"
        )
        self.assertEqual(
            compile(source),
            HEADER
            + "return static fn(): string => component(\n"
            "  componentClass: App\\View\\Components\\Alert::class,\n"
            "  slots: [\n"
            "    'title' => 'Server Error',\n"
            "  ],\n"
            "  slot: '<strong>Whoops!</strong> Something went wrong!',\n"
            ");\n",
        )

    def test_buffered_output(self):
        self.assertEqual(
            compile("@if($show)\n<p>{{ $msg }}</p>\n@endif\n"),
            HEADER
            + "return static function (array $__data): string {\n"
            "  $msg = $__data['msg'] ?? null;\n"
            "  $show = $__data['show'] ?? null;\n"
            "\n"
            "  ob_start();\n"
            "?>\n"
            "<?php if ($show): ?>\n"
            f"<p><?= {escaped('$msg')} ?></p>\n"
            "<?php endif; ?>\n"
            "<?php\n"
            "  return ob_get_clean();\n"
            "};\n",
        )

    def test_statements_slot(self):
        self.assertEqual(
            compile("<x-menu>@each($items as $item){{ $item }}@endeach</x-menu>"),
            HEADER
            + "return static function (array $__data): string {\n"
            "  $items = $__data['items'] ?? null;\n"
            "\n"
            "  return component(\n"
            "    componentClass: App\\View\\Components\\Menu::class,\n"
            "    slot: static function () use ($items): string {\n"
            "      $__out = '';\n"
            "      foreach ($items as $item) {\n"
            f"        $__out .= {escaped('$item')};\n"
            "      }\n"
            "      return $__out;\n"
            "    },\n"
            "  );\n"
            "};\n",
        )

    def test_top_level_accessor_hoist(self):
        self.assertEqual(
            compile("{{ $user.name }} and {{ $user.name }}"),
            HEADER
            + "return static function (array $__data): string {\n"
            "  $user = $__data['user'] ?? null;\n"
            "  $__user_name = data_get($user, 'name');\n"
            "\n"
            f"  return {escaped('$__user_name')} . ' and ' . {escaped('$__user_name')};\n"
            "};\n",
        )

    def test_loop_accessor_hoist(self):
        output = compile("@each($users as $user)\n{{ $user.name }} {{ $user.name }}\n@endeach")
        self.assertEqual(output.count("data_get("), 1)
        self.assertIn(
            "array_map(static function (mixed $user): string {\n"
            "    $__user_name = data_get($user, 'name');\n"
            f"    return {escaped('$__user_name')} . ' ' . {escaped('$__user_name')};\n"
            "  }, $__items)",
            output,
        )

    def test_keyed_loop(self):
        output = compile("@each($map as $k => $v){{ $k }}={{ $v }}@endeach")
        self.assertIn("  $__items = iterator_to_array($map ?: []);\n", output)
        self.assertIn(
            "array_map(static fn(mixed $k, mixed $v): string => "
            f"{escaped('$k')} . '=' . {escaped('$v')}, array_keys($__items), $__items)",
            output,
        )

    def test_loop_with_surrounding_text(self):
        output = compile("<ul>@each($xs as $x)<li>{{ $x }}</li>@endeach</ul>")
        self.assertIn(
            "  return '<ul>' . implode('', array_map(static fn(mixed $x): string => "
            f"'<li>' . {escaped('$x')} . '</li>', $__items)) . '</ul>';\n",
            output,
        )

    def test_slot_closures_capture_loop_variables(self):
        output = compile(
            "@each($posts as $post)\n<x-card>{{ $post.title }} by {{ $author }}</x-card>\n@endeach"
        )
        self.assertIn("use ($author, $post)", output)
        self.assertIn("$author = $__data['author'] ?? null;", output)
        self.assertNotIn("$post = $__data", output)

    def test_raw_echo_is_not_escaped(self):
        output = compile("{{{ $x }}}")
        self.assertIn("  return (string) $x;\n", output)
        self.assertNotIn("htmlspecialchars", output)

    def test_constant_raw_expression(self):
        self.assertEqual(
            compile("{{{ 'a' . 'b' }}}"),
            HEADER + "return static fn(): string => (string) ('a' . 'b');\n",
        )

    def test_raw_operands_are_wrapped_once(self):
        self.assertIn("  return (string) ($a . $b);\n", compile("<?= $a . $b; ?>"))
        self.assertIn("  return (string) ($a ?: $b);\n", compile("{{{ $a ?: $b }}}"))

    def test_accessor_after_rebinding_loop_is_not_hoisted(self):
        output = compile(
            "{{ $user.name }}@each($users as $user)<i>{{ $user }}</i>@endeach{{ $user.name }}"
        )
        self.assertNotIn("$__user_name", output)
        self.assertIn(f"<?php endforeach; ?><?= {escaped(USER_NAME)} ?>", output)

    def test_hoist_stops_at_rebinding_loop(self):
        output = compile(
            "{{ $user.name }}{{ $user.name }}"
            "@each($users as $user){{ $user }}@endeach{{ $user.name }}"
        )
        self.assertIn("  $__user_name = data_get($user, 'name');\n", output)
        self.assertIn(f"<?php endforeach; ?><?= {escaped(USER_NAME)} ?>", output)

    def test_slot_echo_is_never_escaped(self):
        output = compile("<div>{{ $slot }}</div>")
        self.assertIn("  $slot = $__data['slot'] ?? null;\n", output)
        self.assertIn("($slot instanceof \\Closure ? $slot() : (string) $slot)", output)
        self.assertNotIn("htmlspecialchars", output)

    def test_boolean_attribute(self):
        output = compile('<input type="checkbox" @checked($on)>')
        self.assertIn("<?php if ($on) { echo ' checked'; } ?>", output)

    def test_existence_block(self):
        output = compile("@has($user.email)<a>mail</a>@endhas")
        self.assertIn("<?php if (!empty(data_get($user, 'email'))): ?><a>mail</a><?php endif; ?>", output)

    def test_host_code_passes_through(self):
        output = compile("<?php $x = 1; ?>{{ $x }}")
        self.assertIn("<?php $x = 1; ?>", output)
        self.assertIn("ob_start();", output)

    def test_comment_is_not_printed(self):
        output = compile("{{-- secret */ note --}}<p>hi</p>")
        self.assertIn("'<p>hi</p>'", output)
        self.assertNotIn("secret", output)

    def test_malformed_directive_is_literal(self):
        self.assertEqual(
            compile("@if($a yes"),
            HEADER + "return static fn(): string => '@if($a yes';\n",
        )

    def test_custom_namespace(self):
        output = compile("<x-forms.text-input />", namespace="Acme\\Ui")
        self.assertIn("component(componentClass: Acme\\Ui\\Forms\\TextInput::class)", output)

    def test_custom_indent(self):
        output = compile("Hello, {{ $name }}", options=CompileOptions(indent="    "))
        self.assertIn("\n    $name = $__data['name'] ?? null;\n", output)
        self.assertIn("\n    return 'Hello, '", output)

    def test_output_is_deterministic(self):
        source = (
            "{{ $user.name }}{{ $user.name }}"
            "@each($users as $user){{ $user.name }}{{ $user.name }}@endeach"
        )
        self.assertEqual(compile(source), compile(source))
        self.assertIn("$__user_name_2 = data_get($user, 'name');", compile(source))


def test_strategy_is_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="aurynx.compiler.codegen.generator")
    compile("{{ $x }}")
    assert "Compiling template with string_concat strategy" in caplog.text
