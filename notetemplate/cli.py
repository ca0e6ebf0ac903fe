"""Click CLI interface for notetemplate."""

import asyncio
from pathlib import Path

import click
from click import Context, argument, command, group, option, pass_context
from click import Path as ClickPath
from rich.console import Console
from rich.table import Table

from notetemplate import frontmatter
from notetemplate.config import TemplatingConfig
from notetemplate.engine import TemplatingEngine
from notetemplate.exceptions import FrontmatterParseError, TemplatingError
from notetemplate.tags import (
    code_block_has_ignore_comment,
    get_code_blocks,
    get_tags,
    is_comment_tag,
    validate_tags,
)

console = Console(stderr=True)


def _parse_variables(variables: tuple[str, ...]) -> dict[str, str]:
    parsed = {}
    for item in variables:
        key, separator, value = item.partition("=")
        if not separator or not key.strip():
            raise click.BadParameter(
                f"Expected KEY=VALUE, got '{item}'", param_hint="--var"
            )
        parsed[key.strip()] = value
    return parsed


@command()
@argument("name")
@option(
    "--templates",
    type=ClickPath(exists=True, file_okay=False, dir_okay=True),
    help="Directory containing templates",
)
@option("--var", "variables", multiple=True, help="Template variable as KEY=VALUE")
@option(
    "--config",
    "config_file",
    type=ClickPath(dir_okay=False),
    help="YAML configuration file",
)
@pass_context
def render(
    ctx: Context,
    name: str,
    templates: str | None,
    variables: tuple[str, ...],
    config_file: str | None,
):
    """Render the template NAME and print the result."""
    local_vars = _parse_variables(variables)

    overrides = {}
    if templates is not None:
        overrides["templates_dir"] = Path(templates).resolve()

    config = TemplatingConfig(
        config_file=Path(config_file) if config_file else None, **overrides
    )
    if config.templates_dir is None:
        console.print("[red]Error:[/red] No templates directory configured. Pass --templates.")
        ctx.exit(1)

    engine = TemplatingEngine(config)

    try:
        result = asyncio.run(engine.render_template_by_name(name, local_vars))
    except TemplatingError as e:
        console.print(f"[red]Error:[/red] {e}")
        ctx.exit(1)

    click.echo(result.output)
    if not result.ok:
        ctx.exit(1)


@command()
@argument("file", type=ClickPath(exists=True, dir_okay=False))
@pass_context
def validate(ctx: Context, file: str):
    """Check tag balance and frontmatter of a template FILE."""
    text = Path(file).read_text(encoding="utf-8")

    table = Table(title=f"Template Validation: {file}")
    table.add_column("Check", style="cyan")
    table.add_column("Status", style="yellow")
    table.add_column("Details")

    failed = False

    tag_error = validate_tags(text)
    if tag_error is None:
        tags = get_tags(text)
        comments = sum(1 for tag in tags if is_comment_tag(tag))
        table.add_row(
            "Tags", "[green]OK[/green]", f"{len(tags)} tags, {comments} comments"
        )
    else:
        failed = True
        table.add_row("Tags", "[red]Failed[/red]", tag_error.description)

    if frontmatter.is_frontmatter_template(text):
        try:
            attributes = frontmatter.parse_attributes(text)
            table.add_row(
                "Frontmatter", "[green]OK[/green]", f"{len(attributes)} attributes"
            )
        except FrontmatterParseError as e:
            failed = True
            table.add_row("Frontmatter", "[red]Failed[/red]", str(e))
    else:
        table.add_row("Frontmatter", "[dim]None[/dim]", "")

    code_blocks = get_code_blocks(text)
    if code_blocks:
        ignored = sum(1 for block in code_blocks if code_block_has_ignore_comment(block))
        table.add_row(
            "Code blocks",
            "[green]OK[/green]",
            f"{len(code_blocks)} blocks, {ignored} marked template: ignore",
        )
    else:
        table.add_row("Code blocks", "[dim]None[/dim]", "")

    console.print(table)

    if tag_error is not None:
        click.echo(tag_error.format())

    if failed:
        ctx.exit(1)


@group()
def main():
    """Render note templates from the command line."""
    pass


main.add_command(render)
main.add_command(validate)
