"""CLI entry point for the verdant content platform."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from verdant.errors import VerdantError

console = Console()


@click.group()
@click.version_option(version="0.1.0")
def main() -> None:
    """verdant agent-driven content platform."""


def build_services():
    from verdant.config import get_settings
    from verdant.log import configure_logging
    from verdant.services import Services

    settings = get_settings()
    configure_logging(settings.log_level)
    return Services(settings)


@contextmanager
def _session() -> Iterator:
    """Yield wired services; domain errors end the command with exit code 1."""
    services = None
    try:
        services = build_services()
        yield services
    except VerdantError as e:
        console.print(f"[bold red]Error ({e.code}):[/bold red] {e.message}")
        raise SystemExit(1)
    finally:
        if services is not None:
            services.close()


# ---------------------------------------------------------------------------
# serve: HTTP functions
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", "-p", type=int, default=None, help="Port (default from settings)")
def serve(host: str | None, port: int | None) -> None:
    """Run the HTTP API."""
    import uvicorn

    from verdant.api.app import create_app
    from verdant.config import get_settings

    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_level=settings.log_level.lower(),
    )


@main.command()
def seed() -> None:
    """Create the default agent rows that are missing."""
    from verdant.agents.registry import seed_default_agents

    with _session() as services:
        created = seed_default_agents(services.store)

    if not created:
        console.print("[dim]All agents already configured.[/dim]")
        return
    for role in created:
        console.print(f"  [green]Created:[/green] {role.value}")


# ---------------------------------------------------------------------------
# generate / optimize: single pipeline runs
# ---------------------------------------------------------------------------


@main.command()
@click.option("--niche", "-n", required=True, help="Target niche")
@click.option("--type", "-T", "content_type", default="article", help="Content type")
@click.option("--no-seo", is_flag=True, help="Skip SEO optimization")
def generate(niche: str, content_type: str, no_seo: bool) -> None:
    """Create a content item, optimize it and queue it for approval."""
    with _session() as services:
        with console.status(f"[bold green]Generating {content_type} for {niche}..."):
            result = services.orchestrator().generate_content(niche, content_type, not no_seo)

    details = result["content_details"]
    console.print(
        Panel(
            f"[bold]{details['title']}",
            subtitle=f"#{result['content_id']} | {details['word_count']} words | "
            f"workflow {details['workflow_id']}",
        )
    )
    seo = result["seo_optimization"]
    if seo:
        score = seo["seo_optimizations"].get("seo_score")
        console.print(f"  [green]SEO score:[/green] {score}")
    elif result["seo_error"]:
        console.print(f"  [yellow]SEO optimization failed: {result['seo_error']}[/yellow]")
    console.print(f"  [dim]Next step: {result['next_step']}[/dim]\n")


@main.command()
@click.argument("content_id")
def optimize(content_id: str) -> None:
    """Run SEO optimization for an existing content item."""
    with _session() as services:
        with console.status("[green]Optimizing..."):
            result = services.seo_agent().optimize(_coerce_id(content_id))

    seo = result["seo_optimizations"]
    table = Table(title=f"SEO for content {content_id}")
    table.add_column("Field", width=18)
    table.add_column("Value", width=70)
    table.add_row("Meta title", seo.get("meta_title", ""))
    table.add_row("Description", seo.get("meta_description", ""))
    table.add_row("Keywords", ", ".join(seo.get("keywords", [])))
    table.add_row("Score", str(seo.get("seo_score", "")))
    table.add_row("Keyword density", f"{result['keyword_density']:.4f}")
    console.print(table)


# ---------------------------------------------------------------------------
# daily / weekly: scheduled runs
# ---------------------------------------------------------------------------


@main.command()
def daily() -> None:
    """Run the daily batch."""
    with _session() as services:
        with console.status("[bold green]Running daily batch..."):
            report = services.daily_runner().run_daily()

    table = Table(title="Daily generation")
    table.add_column("#", width=3, justify="right")
    table.add_column("Niche", width=20)
    table.add_column("Status", width=8)
    table.add_column("Title / error", width=60)
    for r in report.results:
        colour = "green" if r.status == "success" else "red"
        table.add_row(
            str(r.article_number),
            r.niche,
            f"[{colour}]{r.status}[/{colour}]",
            (r.title or r.error or "")[:60],
        )
    console.print(table)
    console.print(
        f"  [green]Succeeded:[/green] {report.successful}/{report.target_articles}"
        f"  [red]Failed:[/red] {report.failed}  ({report.execution_time_ms}ms)\n"
    )


@main.command()
def weekly() -> None:
    """Generate one article for a randomly chosen configured niche."""
    with _session() as services:
        with console.status("[bold green]Generating weekly content..."):
            result = services.orchestrator().trigger_weekly_content()

    generation = result["generation_result"]
    console.print(f"\n[bold]Niche:[/bold] {result['selected_niche']}")
    console.print(
        f"[bold]Created:[/bold] {generation['content_details']['title']} "
        f"(#{generation['content_id']})\n"
    )


@main.command()
def status() -> None:
    """Show agent and queue status."""
    with _session() as services:
        snapshot = services.orchestrator().status()

    table = Table(title="System status")
    table.add_column("Metric", width=20)
    table.add_column("Value", width=30)
    for key, value in snapshot.items():
        table.add_row(key.replace("_", " "), str(value))
    console.print(table)


# ---------------------------------------------------------------------------
# approvals: review queue
# ---------------------------------------------------------------------------


@main.group()
def approvals() -> None:
    """Review content waiting for approval."""


@approvals.command("list")
def approvals_list() -> None:
    """List pending approvals."""
    with _session() as services:
        pending = services.approvals().list_pending()

    if not pending:
        console.print("[dim]Nothing waiting for approval.[/dim]")
        return

    table = Table(title="Pending approvals")
    table.add_column("Workflow", width=8, justify="right")
    table.add_column("Content", width=8, justify="right")
    table.add_column("Title", width=50)
    table.add_column("Niche", width=20)
    table.add_column("Words", width=6, justify="right")
    for row in pending:
        content = row["content"]
        table.add_row(
            str(row["id"]),
            str(row["content_item_id"]),
            (content.get("title") or "")[:50],
            content.get("target_niche") or "",
            str(content.get("word_count") or ""),
        )
    console.print(table)


@approvals.command("approve")
@click.argument("workflow_id")
@click.option("--notes", default="", help="Review notes")
def approvals_approve(workflow_id: str, notes: str) -> None:
    """Approve a workflow and publish its content."""
    with _session() as services:
        result = services.approvals().approve(_coerce_id(workflow_id), notes=notes)
    console.print(
        f"[green]Approved[/green] workflow {result['workflow_id']}; "
        f"content {result['content_id']} is {result['content_status']}."
    )


@approvals.command("reject")
@click.argument("workflow_id")
@click.option("--reason", default="", help="Rejection reason")
def approvals_reject(workflow_id: str, reason: str) -> None:
    """Reject a workflow and its content."""
    with _session() as services:
        result = services.approvals().reject(_coerce_id(workflow_id), reason=reason)
    console.print(
        f"[yellow]Rejected[/yellow] workflow {result['workflow_id']} "
        f"(content {result['content_id']})."
    )


# ---------------------------------------------------------------------------
# programs: affiliate catalog
# ---------------------------------------------------------------------------


@main.group()
def programs() -> None:
    """Browse and manage affiliate programs."""


@programs.command("list")
def programs_list() -> None:
    """List active programs by relevance."""
    with _session() as services:
        catalog = services.programs().get_programs()

    table = Table(title="Affiliate programs")
    table.add_column("ID", width=6, justify="right")
    table.add_column("Program", width=40)
    table.add_column("Status", width=12)
    table.add_column("Relevance", width=9, justify="right")
    table.add_column("Commission", width=10, justify="right")
    for p in catalog["programs"]:
        table.add_row(
            str(p["program_id"]),
            p["name"][:40],
            p["status"],
            f"{p['relevance']}%",
            f"{p['commission_rate']:g}%",
        )
    console.print(table)
    summary = catalog["summary"]
    console.print(
        f"  {summary['total']} programs: {summary['discovered']} discovered, "
        f"{summary['applied']} applied, {summary['joined']} joined\n"
    )


@programs.command("apply")
@click.argument("program_id")
def programs_apply(program_id: str) -> None:
    """Mark a program as applied to."""
    with _session() as services:
        result = services.programs().apply(_coerce_id(program_id))
    console.print(f"[green]{result['message']}[/green]")


@programs.command("reject")
@click.argument("program_id")
def programs_reject(program_id: str) -> None:
    """Mark a program as rejected."""
    with _session() as services:
        result = services.programs().reject(_coerce_id(program_id))
    console.print(f"[yellow]{result['message']}[/yellow]")


# ---------------------------------------------------------------------------
# text: one-off generation
# ---------------------------------------------------------------------------


@main.command()
@click.option("--topic", "-t", required=True, help="Topic")
@click.option(
    "--provider",
    "-P",
    type=click.Choice(["gemini", "claude", "openai"]),
    default="gemini",
    help="Text backend",
)
@click.option("--type", "-T", "content_type", default="article", help="Content type")
@click.option("--words", "-w", default=1000, help="Target word count")
@click.option("--tone", default="professional", help="Tone of voice")
@click.option("--keyword", "-k", multiple=True, help="SEO keyword (repeatable)")
def text(
    topic: str,
    provider: str,
    content_type: str,
    words: int,
    tone: str,
    keyword: tuple[str, ...],
) -> None:
    """Generate a standalone piece of text without storing it as content."""
    from verdant.content.studio import TextRequest

    request = TextRequest(
        topic=topic,
        content_type=content_type,
        ai_provider=provider,
        word_count=words,
        tone=tone,
        seo_keywords=list(keyword),
    )
    with _session() as services:
        with console.status(f"[bold green]Generating with {provider}..."):
            result = services.studio().generate_text(request)

    content = result["content"]
    console.print(Panel(f"[bold]{topic}", subtitle=f"{content['word_count']} words | {provider}"))
    console.print(Markdown(content["text"]))


def _coerce_id(value: str) -> int | str:
    """Row ids are integers locally and may be UUID strings remotely."""
    return int(value) if value.isdigit() else value
