"""
CLI integration for code generation functionality.

Provides the generate, query, targets and info subcommands of the
schemagen command line.
"""

import argparse
from typing import Any, Dict

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from ..loaders.facts import FactsLoader
from ..loaders.sqlite import SqliteLoader
from ..logging_config import get_logger
from ..utils import is_url, load_facts
from . import GenerationResult, GenerationRun, get_registry
from .core.config import Flag
from .core.errors import SchemaGenError
from .core.query import load_query_file, parse_query
from .core.templates import TemplateSet

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Initialize rich console
console = Console()

# Syntax highlighting lexer per target
LEXERS = {"go": "go", "python": "python"}


def _flag_dest(target: str, flag: Flag) -> str:
    return f"{target}__{flag.key}"


def add_target_args(parser: argparse.ArgumentParser, registry=None):
    """Add one --<target>-<flag> option per flag of every registered target."""
    registry = registry or get_registry()
    for target in registry.list_targets():
        template_set = registry.lookup(target)
        group = parser.add_argument_group(f"{target} options")
        for flag in template_set.flags:
            option = f"--{target}-{flag.option}"
            dest = _flag_dest(target, flag)
            if flag.is_bool:
                group.add_argument(
                    option, dest=dest, action="store_true", default=None, help=flag.desc
                )
            else:
                default = f" (default: {flag.default})" if flag.default not in (None, "") else ""
                group.add_argument(
                    option,
                    dest=dest,
                    metavar=(flag.placeholder or flag.key).upper().strip("<>"),
                    choices=list(flag.enums) or None,
                    help=f"{flag.desc}{default}",
                )


def _add_common_args(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--target", "-t", default="go", help="Target template set (default: go)"
    )
    parser.add_argument(
        "--out", "-o", metavar="DIR", help="Output directory (default: print to stdout)"
    )
    parser.add_argument("--config", metavar="FILE", help="JSON configuration file")
    parser.add_argument(
        "--verbose", action="store_true", help="Show generation result metadata"
    )
    add_target_args(parser)


def create_codegen_subparsers(subparsers):
    """
    Create the code generation subcommand parsers.

    For use with: schemagen {generate,query,targets,info} [options]

    Args:
        subparsers: Subparser group from main parser
    """
    # generate
    parser = subparsers.add_parser(
        "generate",
        help="Generate code from a database schema",
        description="Generate code for every table, view, enum and procedure of a schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  schemagen generate --sqlite app.db --target go -o models
  schemagen generate --facts schema.json --target python --python-style pydantic
  schemagen generate --facts https://example.com/schema.json -t go --go-package-name db
        """.strip(),
    )
    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument(
        "--facts", metavar="FILE|URL", help="Schema facts document (JSON file or URL)"
    )
    input_group.add_argument("--sqlite", metavar="PATH", help="SQLite database file")
    parser.add_argument("--schema", "-s", default="", help="Schema name to generate")
    _add_common_args(parser)
    parser.set_defaults(func=handle_generate)

    # query
    parser = subparsers.add_parser(
        "query",
        help="Generate code for a hand-written query",
        description="Generate a function (and result type) for one hand-written query",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Parameters are written as %%name type%% in the query text.

Examples:
  schemagen query UserByEmail --sql "SELECT id, name FROM users WHERE email = %%email text%%" \\
      --fields "id integer, name text" --one --driver postgres
  schemagen query cleanup --file cleanup.sql --exec -t python
        """.strip(),
    )
    parser.add_argument("name", nargs="?", help="Query name (defaults to the file stem)")
    sql_group = parser.add_mutually_exclusive_group(required=True)
    sql_group.add_argument("--sql", help="Query text")
    sql_group.add_argument("--file", "-f", metavar="PATH", help="File holding the query text")
    parser.add_argument(
        "--driver", "-d", default="postgres", help="Database driver (default: postgres)"
    )
    parser.add_argument("--fields", default="", help='Result fields, "name type, ..."')
    parser.add_argument("--type", dest="type_name", default="", help="Result type name")
    parser.add_argument("--type-comment", default="", help="Result type comment")
    parser.add_argument("--comment", default="", help="Query function comment")
    parser.add_argument("--exec", action="store_true", help="Query returns no rows")
    parser.add_argument("--one", action="store_true", help="Query returns a single row")
    parser.add_argument(
        "--flat", action="store_true", help="Return the result columns directly"
    )
    parser.add_argument(
        "--interpolate", action="store_true", help="Interpolate every parameter"
    )
    _add_common_args(parser)
    parser.set_defaults(func=handle_query)

    # targets
    parser = subparsers.add_parser("targets", help="List supported targets")
    parser.set_defaults(func=handle_targets)

    # info
    parser = subparsers.add_parser("info", help="Show details about a target")
    parser.add_argument("target", help="Target name or alias")
    parser.set_defaults(func=handle_info)


def _target_set(target: str) -> TemplateSet:
    return get_registry().lookup(target)


def _build_overrides(args: argparse.Namespace, template_set: TemplateSet) -> Dict[str, Any]:
    """Collect the --<target>-<flag> values given for the selected target."""
    overrides = {}
    for flag in template_set.flags:
        value = getattr(args, _flag_dest(template_set.name, flag), None)
        if value is not None:
            overrides[flag.key] = value
    if args.out:
        overrides["output_dir"] = args.out
    return overrides


def _make_loader(args: argparse.Namespace):
    if args.sqlite:
        return SqliteLoader(args.sqlite)

    if is_url(args.facts):
        source, document = load_facts(url=args.facts)
    else:
        source, document = load_facts(file_path=args.facts)
    logger.info("Using facts document from %s", source)
    return FactsLoader(document)


def handle_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    loader = None
    try:
        template_set = _target_set(args.target)
        loader = _make_loader(args)
        run = GenerationRun(
            get_registry(),
            template_set.name,
            loader=loader,
            schema_name=args.schema or loader.schema_name(),
            config=_build_overrides(args, template_set),
            config_file=args.config,
        )
        return _run_and_output(run, args)
    except SchemaGenError as e:
        console.print(f"[red]✗ Error:[/red] {e.message}")
        return 1
    finally:
        if isinstance(loader, SqliteLoader):
            loader.close()


def handle_query(args: argparse.Namespace) -> int:
    """Handle the query subcommand."""
    try:
        template_set = _target_set(args.target)
        options = dict(
            driver=args.driver,
            fields=args.fields,
            type_name=args.type_name,
            type_comment=args.type_comment,
            comment=args.comment,
            exec=args.exec,
            flat=args.flat,
            one=args.one,
            interpolate=args.interpolate,
        )
        if args.file:
            if args.name:
                options["name"] = args.name
            query = load_query_file(args.file, **options)
        else:
            if not args.name:
                raise CLIError("a query name is required with --sql")
            query = parse_query(args.name, args.sql, **options)

        run = GenerationRun(
            get_registry(),
            template_set.name,
            queries=[query],
            config=_build_overrides(args, template_set),
            config_file=args.config,
        )
        return _run_and_output(run, args)
    except (SchemaGenError, CLIError) as e:
        message = e.message if isinstance(e, SchemaGenError) else str(e)
        console.print(f"[red]✗ Error:[/red] {message}")
        return 1


def handle_targets(args: argparse.Namespace) -> int:
    """List supported targets with details."""
    registry = get_registry()

    table = Table(title="📋 Supported Targets", box=box.ROUNDED, title_style="bold cyan")
    table.add_column("Target", style="bold green", no_wrap=True)
    table.add_column("Extension", style="cyan")
    table.add_column("Aliases", style="blue")
    table.add_column("Description", style="dim")

    for target in registry.list_targets():
        info = registry.target_info(target)
        aliases = ", ".join(info["aliases"]) if info["aliases"] else "[dim]none[/dim]"
        table.add_row(target, info["file_extension"], aliases, info["description"])

    console.print()
    console.print(table)
    console.print()
    console.print(
        Panel(
            "[bold]Usage:[/bold] schemagen generate --sqlite [dim]app.db[/dim] --target [cyan]TARGET[/cyan]\n"
            "[bold]Info:[/bold] schemagen info [cyan]TARGET[/cyan]",
            title="💡 Quick Start",
            border_style="blue",
        )
    )
    return 0


def handle_info(args: argparse.Namespace) -> int:
    """Show detailed information about a target."""
    registry = get_registry()
    try:
        info = registry.target_info(args.target)
    except SchemaGenError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        console.print("[dim]Use 'schemagen targets' to see available options[/dim]")
        return 1

    info_text = (
        f"[bold]Target:[/bold] {info['name']}\n"
        f"[bold]File Extension:[/bold] {info['file_extension']}\n"
        f"[bold]Description:[/bold] {info['description']}"
    )
    if info["aliases"]:
        info_text += f"\n[bold]Aliases:[/bold] {', '.join(info['aliases'])}"

    console.print()
    console.print(Panel(info_text, title=f"🔧 {info['name']}", border_style="green"))

    flag_table = Table(
        title="⚙️  Flags", box=box.SIMPLE, show_header=True, header_style="bold cyan"
    )
    flag_table.add_column("Option", style="bold")
    flag_table.add_column("Default", style="green")
    flag_table.add_column("Description")
    for flag in info["flags"]:
        option = f"--{info['name']}-{flag['key'].replace('_', '-')}"
        desc = flag["desc"]
        if flag["enums"]:
            desc += f" ({', '.join(flag['enums'])})"
        flag_table.add_row(option, str(flag["default"]), desc)

    console.print()
    console.print(flag_table)
    return 0


def _run_and_output(run: GenerationRun, args: argparse.Namespace) -> int:
    """Execute a run and output its files with rich formatting."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"[green]Generating {run.target} code...", total=None)
        result = run.run()

    if args.out:
        try:
            written = result.write_all(args.out)
        except OSError as e:
            console.print(f"[red]✗ Failed to write to {args.out}:[/red] {e}")
            return 1
        for path in written:
            console.print(f"[green]✓[/green] Wrote [cyan]{path}[/cyan]")
    else:
        _print_files(result, LEXERS.get(run.target, "text"))

    if args.verbose and result.metadata:
        _print_metadata(result)

    if result.warnings:
        console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")
        console.print()

    return 0


def _print_files(result: GenerationResult, lexer: str):
    for gf in result.files.values():
        console.print(f"[green]══════ 📄 {gf.path} ══════[/green]")
        console.print(Syntax(gf.content, lexer, theme="monokai"))


def _print_metadata(result: GenerationResult):
    metadata_table = Table(
        title="📊 Generation Metadata",
        box=box.SIMPLE,
        show_header=True,
        header_style="bold cyan",
    )
    metadata_table.add_column("Property", style="bold")
    metadata_table.add_column("Value", style="green")

    for key, value in result.metadata.items():
        metadata_table.add_row(key.replace("_", " ").title(), str(value))

    console.print()
    console.print(metadata_table)

