from click.testing import CliRunner

from aurynx import __version__, compile
from aurynx.cli.main import cli


def test_compile_plain_prints_generated_php(tmp_path):
    template = tmp_path / "hello.anx.php"
    template.write_text("Hello, {{ $name }}", encoding="utf-8")

    result = CliRunner().invoke(cli, ["compile", str(template), "--plain"])

    assert result.exit_code == 0, result.output
    assert result.output == compile("Hello, {{ $name }}")


def test_compile_respects_namespace(tmp_path):
    template = tmp_path / "alert.anx.php"
    template.write_text("<x-alert />", encoding="utf-8")

    result = CliRunner().invoke(
        cli, ["compile", str(template), "--plain", "--namespace", "Acme\\Ui"]
    )

    assert result.exit_code == 0, result.output
    assert "Acme\\Ui\\Alert::class" in result.output


def test_version():
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_build_command(tmp_path):
    views = tmp_path / "views"
    views.mkdir()
    (views / "home.anx.php").write_text("<p>{{ $title }}</p>", encoding="utf-8")
    cache = tmp_path / "cache"

    result = CliRunner().invoke(
        cli, ["build", "--views-path", str(views), "--cache-path", str(cache)]
    )

    assert result.exit_code == 0, result.output
    assert "Build complete" in result.output
    assert (cache / "home.php").exists()


def test_build_reports_failures(tmp_path):
    views = tmp_path / "views"
    views.mkdir()
    (views / "broken.anx.php").write_bytes(b"\xff\xfe")

    result = CliRunner().invoke(
        cli, ["build", "--views-path", str(views), "--cache-path", str(tmp_path / "cache")]
    )

    assert result.exit_code == 1
    assert "Build finished with errors" in result.output


def test_build_missing_views_directory(tmp_path):
    result = CliRunner().invoke(cli, ["build", "--views-path", str(tmp_path / "nope")])
    assert result.exit_code == 1
    assert (tmp_path / "nope").exists() is False


def test_build_clean_keeps_views_when_cache_contains_them(tmp_path):
    views = tmp_path / "views"
    views.mkdir()
    template = views / "home.anx.php"
    template.write_text("<p>Home</p>", encoding="utf-8")

    result = CliRunner().invoke(
        cli, ["build", "--clean", "--views-path", str(views), "--cache-path", str(tmp_path)]
    )

    assert result.exit_code == 1
    assert template.exists()
