"""Main CLI entry point."""

from pathlib import Path
from typing import Optional

import rich.panel
import rich_click as click
from rich.console import Console
from rich.syntax import Syntax

from aurynx import __version__
from aurynx.config import AurynxConfig

console = Console()

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.STYLE_HELPTEXT_FIRST = True
click.rich_click.STYLE_COMMANDS_TABLE_SHOW_LINES = False
click.rich_click.STYLE_COMMANDS_TABLE_PAD_EDGE = False
click.rich_click.STYLE_COMMANDS_TABLE_BOX = None
click.rich_click.STYLE_COMMANDS_TABLE_EXPAND = False
click.rich_click.STYLE_OPTIONS_TABLE_EXPAND = False
click.rich_click.STYLE_COMMANDS_TABLE_HEADER = "bold magenta"
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = "Try running 'aurynx --help' for more information."
click.rich_click.STYLE_OPTIONS_TABLE_BOX = None
click.rich_click.STYLE_COMMANDS_PANEL_BOX = None
click.rich_click.STYLE_OPTIONS_PANEL_BOX = None

# Cyan theme
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_OPTION = "cyan"
click.rich_click.STYLE_SWITCH = "cyan"
click.rich_click.STYLE_METAVAR = "dim white"
click.rich_click.STYLE_USAGE_COMMAND = "cyan"
click.rich_click.STYLE_USAGE = "dim"

click.rich_click.OPTION_GROUPS = {
    "aurynx": [
        {
            "name": "Global Flags",
            "options": ["--verbose", "--help", "--version"],
        }
    ]
}

click.rich_click.COMMAND_GROUPS = {
    "aurynx": [
        {
            "name": "Commands",
            "commands": ["build", "watch", "compile"],
        }
    ]
}


# Workaround: rich-click wraps tables in Panels which default to expand=True.
# We monkeypatch Panel to default expand=False to allow natural resizing.
original_panel_init = rich.panel.Panel.__init__


def panel_init(self, *args, **kwargs):
    kwargs.setdefault("expand", False)
    original_panel_init(self, *args, **kwargs)


rich.panel.Panel.__init__ = panel_init  # type: ignore[method-assign]


def project_options(func):
    """Options shared by every command that touches the views directory."""
    func = click.option(
        "--indent",
        envvar="AURYNX_INDENT",
        default=None,
        help="Indentation unit for generated PHP (default: two spaces).",
    )(func)
    func = click.option(
        "--extension",
        envvar="AURYNX_VIEW_EXTENSION",
        default=None,
        help="Template file extension (default: .anx.php).",
    )(func)
    func = click.option(
        "--namespace",
        envvar="AURYNX_COMPONENT_NAMESPACE",
        default=None,
        help="Base PHP namespace for component classes.",
    )(func)
    func = click.option(
        "--cache-path",
        envvar="AURYNX_CACHE_PATH",
        default=None,
        type=click.Path(file_okay=False),
        help="Output directory for compiled views (default: cache/views).",
    )(func)
    func = click.option(
        "--views-path",
        envvar="AURYNX_VIEWS_PATH",
        default=None,
        type=click.Path(file_okay=False),
        help="Directory containing templates (default: resources/views).",
    )(func)
    return func


def _load_config(
    views_path: Optional[str],
    cache_path: Optional[str],
    namespace: Optional[str],
    extension: Optional[str],
    indent: Optional[str],
) -> AurynxConfig:
    return (
        AurynxConfig()
        .with_overrides(
            views_path=views_path,
            cache_path=cache_path,
            component_namespace=namespace,
            view_extension=extension,
            indent=indent,
        )
        .resolve()
    )


def _build(config: AurynxConfig, clean: bool = False):
    from aurynx.compiler.build_artifacts import ViewBuilder
    from aurynx.exceptions import AurynxError

    try:
        return ViewBuilder(config).build(clean=clean)
    except AurynxError as e:
        raise click.ClickException(str(e))


@click.group(
    help=f"""
[bold white on cyan] aurynx [/] [bold cyan]v{__version__}[/] Compile Aurynx templates to PHP.

Run [bold cyan]aurynx build[/] to compile every view into the cache directory.
Run [bold cyan]aurynx watch[/] to recompile views as they change.
"""
)
@click.version_option(__version__)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    envvar="AURYNX_VERBOSE",
    help="Show debug output, including the strategy chosen per template.",
)
def cli(verbose: bool) -> None:
    from aurynx.runtime.logging import configure_logging

    configure_logging(verbose=verbose, target=console)


@cli.command()
@project_options
@click.option("--clean", is_flag=True, help="Delete the cache directory before building.")
def build(
    views_path: Optional[str],
    cache_path: Optional[str],
    namespace: Optional[str],
    extension: Optional[str],
    indent: Optional[str],
    clean: bool,
) -> None:
    """Compile all views into the cache directory."""
    config = _load_config(views_path, cache_path, namespace, extension, indent)

    console.print(f"🔨 Compiling views in [cyan]{config.views_path}[/]...")
    summary = _build(config, clean=clean)

    if not summary.ok:
        console.print(
            f"❌ Build finished with errors "
            f"(compiled={summary.compiled}, failed={summary.failed}, out={summary.out_dir})"
        )
        raise SystemExit(1)

    console.print(
        f"✅ Build complete (compiled={summary.compiled}, out={summary.out_dir})"
    )


@cli.command()
@project_options
@click.option(
    "--no-initial-build",
    is_flag=True,
    envvar="AURYNX_NO_INITIAL_BUILD",
    help="Skip compiling every view before watching.",
)
def watch(
    views_path: Optional[str],
    cache_path: Optional[str],
    namespace: Optional[str],
    extension: Optional[str],
    indent: Optional[str],
    no_initial_build: bool,
) -> None:
    """Compile views, then recompile them whenever they change."""
    import asyncio

    from aurynx.compiler.build_artifacts import ViewBuilder
    from aurynx.runtime.watcher import watch_views

    config = _load_config(views_path, cache_path, namespace, extension, indent)
    if no_initial_build:
        config = config.with_overrides(build_on_start=False)

    if config.build_on_start:
        console.print("🔁 Performing initial compilation...")
        summary = _build(config)
        console.print(
            f"✅ Initial compilation finished ({summary.compiled} compiled, {summary.failed} failed)"
        )
    elif not config.views_path.is_dir():
        raise click.ClickException(f"Views directory '{config.views_path}' does not exist")

    asyncio.run(watch_views(ViewBuilder(config)))


@cli.command(name="compile")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--namespace",
    envvar="AURYNX_COMPONENT_NAMESPACE",
    default=None,
    help="Base PHP namespace for component classes.",
)
@click.option("--indent", envvar="AURYNX_INDENT", default=None, help="Indentation unit.")
@click.option("--plain", is_flag=True, help="Print without syntax highlighting.")
def compile_command(
    file: Path, namespace: Optional[str], indent: Optional[str], plain: bool
) -> None:
    """Compile a single template and print the PHP."""
    from aurynx.compiler.core import compile

    config = AurynxConfig().with_overrides(component_namespace=namespace, indent=indent)

    try:
        template = file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Could not read {file}: {e}")

    output = compile(template, config.component_namespace, config.compile_options)

    if plain:
        click.echo(output, nl=False)
    else:
        console.print(Syntax(output, "php", theme="monokai", word_wrap=True))


if __name__ == "__main__":
    cli()
