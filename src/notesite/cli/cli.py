"""CLI entrypoint: Typer app definition and command registration"""

import typer

from notesite.cli.commands import build_cmd, check_cmd, index_cmd, init_cmd, list_cmd, new_cmd


app = typer.Typer(name="notesite", no_args_is_help=True, help="Static blog builder for Markdown notes")

app.command(name="build")(build_cmd)
app.command(name="check")(check_cmd)
app.command(name="index")(index_cmd)
app.command(name="list")(list_cmd)
app.command(name="new")(new_cmd)
app.command(name="init")(init_cmd)
