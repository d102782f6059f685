"""
Tadka - CLI Entry Point.

Usage:
    tadka scale "1 1/2 cups" 2      Scale a free-text quantity
    tadka grocery plan.json         Build a grocery list from a week plan
    tadka migrate-pantry rice dal   Convert legacy pantry names
    tadka models                    Show the model routing table
    tadka generate --count 5        Generate swipe-deck dishes
    tadka --help                    Show help
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="tadka",
    help="Tadka - meal planning with cache-first AI generation.",
    add_completion=False,
)
console = Console()


@app.callback()
def main() -> None:
    """Configure logging and optional tracing from settings."""
    from tadka.config import settings
    from tadka.observability.tracing import init_tracing

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_tracing()


@app.command()
def scale(
    quantity: str = typer.Argument(..., help='Free-text quantity, e.g. "1 1/2 cups"'),
    servings: float = typer.Argument(..., help="Serving multiplier"),
) -> None:
    """Scale an ingredient quantity."""
    from tadka.tools.quantity import get_scaled_quantity

    console.print(get_scaled_quantity(quantity, servings))


@app.command()
def grocery(
    plan_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Week plan JSON (list of days)"),
    pantry: str = typer.Option("", "--pantry", "-p", help="Comma-separated pantry names"),
) -> None:
    """Build the grocery list for a week plan."""
    from tadka.kitchen.grocery import generate_grocery_list
    from tadka.models.entities import DayPlan

    days = [DayPlan.model_validate(d) for d in json.loads(plan_file.read_text())]
    pantry_names = [p.strip() for p in pantry.split(",") if p.strip()]
    items = generate_grocery_list(days, pantry_names)

    table = Table(title="Grocery List")
    table.add_column("Item")
    table.add_column("Qty")
    table.add_column("Category")
    table.add_column("For")
    table.add_column("Stocked")
    for item in sorted(items, key=lambda i: (i.category, i.name.lower())):
        table.add_row(
            item.name,
            item.quantity,
            item.category,
            ", ".join(item.source_dishes),
            "✅" if item.is_stocked else "",
        )
    console.print(table)


@app.command("migrate-pantry")
def migrate_pantry_cmd(
    names: List[str] = typer.Argument(..., help="Legacy pantry names"),
) -> None:
    """Convert a legacy list of names into pantry items (JSON)."""
    from tadka.kitchen.pantry import migrate_pantry

    items = migrate_pantry(names)
    console.print_json(json.dumps([i.model_dump(mode="json") for i in items]))


@app.command()
def models() -> None:
    """Show the model and token budget for every task type."""
    from tadka.llm.model_router import TaskType, get_token_budget, select_model

    table = Table(title="Model Routing")
    table.add_column("Task")
    table.add_column("Model")
    table.add_column("Max out")
    table.add_column("Temp")
    table.add_column("Input budget")
    for task in TaskType:
        config = select_model(task)
        budget = get_token_budget(task)
        table.add_row(
            task.value,
            config["model"],
            str(config["max_output_tokens"]),
            str(config["temperature"]),
            str(budget["max_input_tokens"]),
        )
    console.print(table)


@app.command()
def generate(
    count: int = typer.Option(5, "--count", "-n", min=1, help="Number of dishes"),
    profile_file: Optional[Path] = typer.Option(None, "--profile", exists=True, dir_okay=False, help="UserProfile JSON"),
    mode: str = typer.Option("Explorer", "--mode", "-m", help="Feed mode"),
) -> None:
    """Generate swipe-deck dishes (exact cache, coalescing, semantic dedup)."""
    from tadka.models.entities import UserProfile

    profile = (
        UserProfile.model_validate_json(profile_file.read_text()) if profile_file else UserProfile()
    )
    dishes = asyncio.run(_generate(count, profile, mode))

    if not dishes:
        console.print("[yellow]No dishes generated.[/yellow]")
        raise typer.Exit(1)

    for dish in dishes:
        console.print(
            Panel.fit(
                f"{dish.description}\n\n[dim]{dish.cuisine} · {dish.meal_type} · "
                f"{dish.macros.calories:.0f} kcal[/dim]",
                title=f"[bold]{dish.display_name}[/bold]",
                border_style="green",
            )
        )


async def _generate(count: int, profile, mode: str):
    from tadka.db.client import (
        InMemoryDocumentStore,
        SupabaseDocumentStore,
        SupabaseVectorIndex,
        is_configured,
    )
    from tadka.generation.orchestrator import DishGenerationOrchestrator
    from tadka.llm.client import OpenAIEmbedder, OpenAIGenerator
    from tadka.observability.cost import get_cost_tracker, get_optimization_stats, log_optimization_stats
    from tadka.optimization.coalescer import RequestCoalescer
    from tadka.optimization.dedup import SemanticDuplicateChecker
    from tadka.optimization.embedding_cache import CachedEmbedder, EmbeddingCache

    generator = OpenAIGenerator()
    if not generator.is_available():
        console.print("[red]OPENAI_API_KEY is not set; only cached dishes can be served.[/red]")

    coalescer = RequestCoalescer()
    cache = EmbeddingCache.from_settings()
    embedder = CachedEmbedder(OpenAIEmbedder(), cache, coalescer)

    if is_configured():
        store = SupabaseDocumentStore()
        index = SupabaseVectorIndex(embedder)
        checker = SemanticDuplicateChecker(index)
    else:
        console.print("[dim]Supabase not configured; using an in-memory store.[/dim]")
        store = InMemoryDocumentStore()
        index = None
        checker = None

    orchestrator = DishGenerationOrchestrator(
        generator, store, coalescer=coalescer, checker=checker, index=index
    )
    dishes = await orchestrator.generate_new_dishes(count, profile, mode)
    await orchestrator.drain()

    log_optimization_stats(get_optimization_stats(cache, coalescer, get_cost_tracker()))
    return dishes


@app.command()
def version() -> None:
    """Show version information."""
    from tadka import __version__

    console.print(f"Tadka version {__version__}")


if __name__ == "__main__":
    app()
