"""CLI command implementations"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from notesite.config import Settings, load_config
from notesite.core.parse import new_doc, parse_dir
from notesite.core.pipeline import run_build, run_check, run_index
from notesite.crud.database import init_db, make_engine, reset_db
from notesite.crud.documents import list_documents, list_tags


SiteOpt = Annotated[Optional[str], typer.Option("--site-config", help="TOML site configuration file")]
ContentOpt = Annotated[Optional[str], typer.Option("--content-dir", help="Content directory")]
VerboseOpt = Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None, verbose: bool = False) -> Settings:
    """Load config and configure logging, with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return settings


def _echo_index(counts: dict, changes: list) -> None:
    """Print per-doc index status and a summary line."""
    for status, path in changes:
        typer.echo(f"  {status}: {path}")
    typer.echo(
        f"Index updated - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged, "
        f"{counts['removed']} removed"
    )


def build_cmd(
    site: SiteOpt = None,
    content: ContentOpt = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", "-d", help="Output directory")] = None,
    drafts: Annotated[Optional[bool], typer.Option("--drafts/--no-drafts", "-D", help="Include drafts (overrides buildDrafts)")] = None,
    future: Annotated[Optional[bool], typer.Option("--future/--no-future", "-F", help="Include future-dated documents")] = None,
    base_url: Annotated[Optional[str], typer.Option("--base-url", "-b", help="Override baseURL")] = None,
    clean: Annotated[bool, typer.Option("--clean/--no-clean", help="Empty the output directory first")] = True,
    verbose: VerboseOpt = False,
    ):
    """Index the content and render the published site."""
    settings = _settings(overrides={
        "site_config": site, "content_dir": content, "output_dir": out,
        "build_drafts": drafts, "build_future": future, "base_url": base_url,
    }, verbose=verbose)
    engine = make_engine(settings.db_url)
    init_db(engine)

    try:
        result = run_build(settings, engine, clean=clean)
    except (ValueError, RuntimeError) as e:
        _fail("Build failed", e)

    _echo_index(result.counts, result.changes)
    if result.skipped:
        typer.echo(f"Skipped {result.skipped} draft or future document(s)")
    typer.echo(f"Built {result.published} document(s) into {len(result.written)} file(s) in {settings.output_dir}/")


def check_cmd(
    site: SiteOpt = None,
    content: ContentOpt = None,
    strict: Annotated[bool, typer.Option("--strict", help="Treat warnings as errors")] = False,
    verbose: VerboseOpt = False,
    ):
    """Validate front matter, duplicates, tag reachability and menu links."""
    settings = _settings(overrides={"site_config": site, "content_dir": content}, verbose=verbose)
    try:
        issues = run_check(settings)
    except ValueError as e:
        _fail("Check failed", e)

    for issue in issues:
        typer.echo(f"  {issue}")
    errors = [i for i in issues if i.severity == "error" or strict]
    typer.echo(f"{len(errors)} error(s), {len(issues) - len(errors)} warning(s)")
    if errors:
        raise typer.Exit(1)


def index_cmd(
    content: ContentOpt = None,
    verbose: VerboseOpt = False,
    ):
    """Parse the content directory and update the content index."""
    settings = _settings(overrides={"content_dir": content}, verbose=verbose)
    engine = make_engine(settings.db_url)
    init_db(engine)
    try:
        docs = parse_dir(Path(settings.content_dir))
    except RuntimeError as e:
        _fail(str(e))
    counts, changes = run_index(engine, docs)
    _echo_index(counts, changes)


def list_cmd(
    drafts: Annotated[Optional[bool], typer.Option("--drafts/--published", help="Only drafts, or only published")] = None,
    tag: Annotated[Optional[str], typer.Option("--tag", help="Only documents with this tag")] = None,
    tags: Annotated[bool, typer.Option("--tags", help="List tags with published counts instead")] = False,
    ):
    """List indexed documents (newest first) or tags."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)
    with Session(engine) as session:
        if tags:
            rows = [f"{t.name} ({count})" for t, count in list_tags(session)]
        else:
            rows = [
                f"{d.date:%Y-%m-%d}  {d.path}  {d.title}{'  [draft]' if d.draft else ''}" if d.date
                else f"{'':10}  {d.path}  {d.title}"
                for d in list_documents(session, drafts=drafts, tag=tag)
            ]
    if not rows:
        typer.echo("Nothing indexed. Run 'notesite index' first.")
        raise typer.Exit(1)
    for row in rows:
        typer.echo(row)


def new_cmd(
    path: Annotated[str, typer.Argument(help="Path relative to the content dir, e.g. posts/my-note.md")],
    content: ContentOpt = None,
    fmt: Annotated[str, typer.Option("--format", help="Front matter format: toml or yaml")] = "toml",
    ):
    """Create a draft article with front matter filled in."""
    settings = _settings(overrides={"content_dir": content})
    try:
        target = new_doc(Path(settings.content_dir), path, datetime.now().astimezone(), fmt)
    except (FileExistsError, ValueError) as e:
        _fail(str(e))
    typer.echo(f"Created {target}")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize the content index. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing index cleared.")
    else:
        init_db(engine)
    typer.echo(f"Index initialized at: {settings.db_url}")
