from __future__ import annotations
from pathlib import Path
from typing import NoReturn, Optional
import json
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from . import config
from .db import init_db
from .errors import PersistError
from .models import Blog
from .services import BlogStore, open_store

app = typer.Typer(help="blogpad: local blog notes with tags")
console = Console()


@app.callback()
def _boot(verbose: bool = typer.Option(False, "--verbose", "-v", help="debug logging")):
    logging.basicConfig(
        level="DEBUG" if verbose else config.log_level(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    init_db()

def _store() -> BlogStore:
    return open_store()

def _fail(message: str) -> NoReturn:
    console.print(f"[red]{escape(message)}[/]")
    raise typer.Exit(1)

def _require_text(title: str, content: str) -> tuple[str, str]:
    title, content = title.strip(), content.strip()
    if not title or not content:
        _fail("Title and content are required")
    return title, content

def _hashtags(blog: Blog) -> str:
    return " ".join(f"#{t}" for t in blog.tags)


@app.command()
def add(
    title: str = typer.Option(..., "--title", "-t"),
    content: str = typer.Option(..., "--content", "-c"),
    tags: str = typer.Option("", "--tags", "-g", help="comma separated"),
):
    title, content = _require_text(title, content)
    try:
        b = _store().create(title, content, tags.strip())
    except PersistError as e:
        _fail(str(e))
    console.print(f"[green]Created[/] #{b.id}: {escape(b.title)}")

@app.command("list")
def _list(tag: Optional[str] = typer.Option(None, "--tag", help="exact tag to filter by")):
    store = _store()
    store.sort_by_recency()
    blogs = store.filter_by_tag((tag or "").strip())
    table = Table(title="blogpad")
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Title", style="bold")
    table.add_column("Tags", style="magenta")
    table.add_column("Created")
    table.add_column("Updated")
    for b in blogs:
        table.add_row(
            str(b.id), Text(b.title), Text(_hashtags(b)),
            b.formatted_created_at(), b.formatted_updated_at(),
        )
    console.print(table)

@app.command()
def show(blog_id: int):
    b = _store().get(blog_id)
    if not b:
        _fail(f"Not found: {blog_id}")
    console.rule(Text(f"#{b.id} {b.title}"))
    console.print(f"[dim]created:[/] {b.formatted_created_at()}")
    console.print(f"[dim]updated:[/] {b.formatted_updated_at()}")
    if b.tags:
        console.print(Text(_hashtags(b), style="magenta"))
    console.print(Text(b.content))

@app.command()
def edit(
    blog_id: int,
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    content: Optional[str] = typer.Option(None, "--content", "-c"),
    tags: Optional[str] = typer.Option(None, "--tags", "-g", help="comma separated"),
):
    store = _store()
    current = store.get(blog_id)
    if not current:
        _fail(f"Not found: {blog_id}")
    new_title, new_content = _require_text(
        current.title if title is None else title,
        current.content if content is None else content,
    )
    new_tags = current.tags_text if tags is None else tags.strip()
    try:
        b = store.update(blog_id, new_title, new_content, new_tags)
    except PersistError as e:
        _fail(str(e))
    console.print(f"[green]Updated[/] #{b.id}: {escape(b.title)}")

@app.command()
def delete(blog_id: int, yes: bool = typer.Option(False, "--yes", "-y", help="skip confirmation")):
    if not yes:
        typer.confirm(f"Delete blog #{blog_id}?", abort=True)
    try:
        removed = _store().delete(blog_id)
    except PersistError as e:
        _fail(str(e))
    if removed:
        console.print(f"[yellow]Deleted[/] #{blog_id}")
    else:
        console.print(f"[dim]Nothing to delete[/] #{blog_id}")

@app.command()
def tags():
    names = _store().all_tags()
    if not names:
        console.print("[dim]no tags[/]")
        return
    console.print(Text(" ".join(f"#{t}" for t in names), style="magenta"))

@app.command()
def export(to: Path = typer.Option(..., "--to")):
    payload = [b.to_record() for b in _store().blogs]
    to.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    console.print(f"[green]Exported[/] {len(payload)} blogs → {escape(str(to))}")

def main():
    app()

if __name__ == "__main__":
    main()
