import json
import os
from pathlib import Path

import click
from click.shell_completion import get_completion_class
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from alman import __version__
from alman.config import Config
from alman.errors import AlmanError, InvalidInputError, NotFoundError
from alman.locator import ConfigLocator, ConfigTarget
from alman.log import setup_logging
from alman.models import Alias
from alman.render import Render
from alman.store import AliasStore

console = Console()

FILE_SETTINGS = {
    ConfigTarget.BASH: "bashrc",
    ConfigTarget.GIT: "gitconfig",
}

COMMAND_ALIASES = {
    "sh": "show",
    "del": "remove",
    "mod": "edit",
}


def report_error(error: AlmanError) -> None:
    """Print an error as a single line, plus suggestions when there are any"""
    console.print(f"[red]✗[/] {escape(str(error))}")
    if isinstance(error, NotFoundError) and error.suggestions:
        console.print(f"[dim]Did you mean: {escape(', '.join(error.suggestions))}?[/]")


class AliasedGroup(click.Group):
    """Group that accepts short operation names and reports alman errors"""

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, COMMAND_ALIASES.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        # show the canonical name in help and error messages
        _, cmd, args = super().resolve_command(ctx, args)
        return (cmd.name if cmd else None), cmd, args

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except AlmanError as e:
            report_error(e)
            ctx.exit(1)


@click.group(cls=AliasedGroup)
@click.option("--content", "-c", is_flag=True, help="Match against the whole line or function body")
@click.option("--git", "-g", is_flag=True, help="Work on the [alias] section of ~/.gitconfig")
@click.option("--file", "-f", "file_path", type=click.Path(dir_okay=False), help="Config file to use instead of the default")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__, prog_name="alman")
@click.pass_context
def main(ctx, content, git, file_path, verbose):
    """alman - manage the aliases in your shell and git config files

    Aliases are read from and written to ~/.bashrc, or ~/.gitconfig with --git.
    """
    locator = ConfigLocator()
    config = Config(locator.home_dir / ".alman")
    setup_logging("DEBUG" if verbose else config.get("log_level", "WARNING"))

    target = ConfigTarget.GIT if git else ConfigTarget.BASH
    if file_path:
        path = Path(file_path)
    else:
        path = locator.target_file(target, config.get(FILE_SETTINGS[target]))

    store = AliasStore(
        path,
        git=git,
        render=Render(config.highlight_style),
        backup_dir=config.backup_dir if config.get("auto_backup") else None,
        max_backups=config.get("max_backups", 10),
    )
    ctx.obj = {"store": store, "config": config, "content": content, "git": git}


def _collect(search, name, content):
    try:
        return search(name, content)
    except NotFoundError:
        return []


@main.command()
@click.argument("name", required=False)
@click.pass_obj
def show(obj, name):
    """Show a specific alias or all aliases (and shell functions)"""
    store = obj["store"]
    content = obj["content"]

    aliases = _collect(store.find, name, content)
    functions = [] if obj["git"] else _collect(store.find_functions, name, content)
    if name is not None and not aliases and not functions:
        raise NotFoundError(f"No alias or function matching '{name}'")

    for line in aliases:
        console.print(line, soft_wrap=True)
    if functions:
        if aliases:
            console.print()
        for body in functions:
            console.print(body, soft_wrap=True)


@main.command()
@click.argument("name")
@click.argument("command")
@click.pass_obj
def add(obj, name, command):
    """Add a new alias"""
    new_line = obj["store"].add(name, command)
    console.print(f"[green]✔[/] New alias added: [cyan]{escape(new_line.strip())}[/]")


@main.command()
@click.argument("name")
@click.pass_obj
def remove(obj, name):
    """Remove an alias"""
    for line in obj["store"].remove(name):
        console.print(f"[green]✔[/] Removed alias: {escape(line.strip())}")


@main.command()
@click.argument("name")
@click.argument("command")
@click.pass_obj
def edit(obj, name, command):
    """Edit an alias"""
    for line in obj["store"].edit(name, command):
        console.print(f"[green]✔[/] Edited alias: {escape(line.strip())}")
    new_line = Alias(name=name, command=command, git=obj["git"]).to_line()
    console.print(f"[dim]Now: {escape(new_line.strip())}[/]")


@main.command(name="config")
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.pass_obj
def config_command(obj, key, value):
    """Show settings, or change one with KEY VALUE"""
    config = obj["config"]
    if key is None:
        table = Table(title=f"Settings ({config.config_path})")
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Value", style="green")
        for name, current in sorted(config.config.items()):
            table.add_row(name, escape(json.dumps(current)))
        console.print(table)
        return

    if key not in Config.DEFAULT_CONFIG:
        raise InvalidInputError(f"Unknown setting '{key}'")
    if value is None:
        console.print(escape(json.dumps(config.get(key))))
        return

    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    config.set(key, parsed)
    console.print(f"[green]✔[/] {escape(key)} = {escape(json.dumps(parsed))}")


@main.command()
@click.argument("shell", required=False, type=click.Choice(["bash", "zsh", "fish"]))
def completion(shell):
    """Print the shell completion script for bash, zsh or fish.

    Examples:
      eval "$(alman completion bash)"
      alman completion fish > ~/.config/fish/completions/alman.fish
    """
    target_shell = shell or os.path.basename(os.environ.get("SHELL", ""))
    completion_cls = get_completion_class(target_shell)
    if completion_cls is None:
        raise InvalidInputError("Unable to determine shell. Specify one of: bash, zsh, fish")

    script = completion_cls(main, {}, "alman", "_ALMAN_COMPLETE").source()
    click.echo(script)


if __name__ == "__main__":
    main()
