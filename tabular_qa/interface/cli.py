# tabular_qa/interface/cli.py

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich import box
from rich.text import Text

from tabular_qa.domain.models import Answer, MatchMethod


console = Console()


def display_welcome_banner() -> None:
    console.print(Panel.fit(
        "[bold cyan]📊 Spreadsheet Knowledge Assistant[/bold cyan]\n"
        "[dim]TF-IDF + Jaccard + column boost, with page summaries and web fallback[/dim]",
        box=box.DOUBLE,
        border_style="cyan",
    ))


def display_indexing_status(num_records: int, vocab_size: int) -> None:
    if num_records == 0:
        console.print("\n[yellow]⚠[/yellow] No records loaded. Every question will go to web search.\n")
        return
    console.print(
        f"\n[green]✓[/green] Index built — [bold]{num_records}[/bold] records, "
        f"[bold]{vocab_size}[/bold] terms.\n"
    )


def prompt_for_query() -> str:
    return Prompt.ask("\n[bold yellow]❓ Your question[/bold yellow]")


def display_answer(question: str, answer: Answer) -> None:
    console.print(f"\n[bold]Answer for:[/bold] [italic]\"{question}\"[/italic]\n")

    border = _method_to_color(answer.match_method)

    meta = Text()
    if answer.match_method is not None:
        meta.append("🧭 Method: ", style="dim")
        meta.append(answer.match_method.value, style="bold white")
    if answer.sheet is not None:
        meta.append("\n📄 Sheet: ", style="dim")
        meta.append(answer.sheet, style="bold white")
    if answer.confidence is not None:
        color = _confidence_to_color(answer.confidence)
        meta.append("\n🎯 Confidence: ", style="dim")
        meta.append(f"{answer.confidence:.3f}", style=color)
    if answer.source:
        meta.append("\n🔗 Source: ", style="dim")
        meta.append(answer.source, style="underline")

    content = Text()
    if meta.plain:
        content.append_text(meta)
        content.append("\n\n")
    content.append(answer.answer)

    console.print(Panel(
        content,
        border_style=border,
        box=box.ROUNDED,
        padding=(1, 2),
    ))


def display_error(message: str) -> None:
    console.print(f"\n[bold red]✗ Error:[/bold red] {message}\n")


def ask_continue() -> bool:
    answer = Prompt.ask(
        "\n[dim]Ask another?[/dim]",
        choices=["y", "n"],
        default="y",
    )
    return answer.lower() == "y"


def _confidence_to_color(confidence: float) -> str:
    if confidence >= 0.75:
        return "green"
    elif confidence >= 0.40:
        return "yellow"
    else:
        return "red"


def _method_to_color(method: MatchMethod | None) -> str:
    if method == MatchMethod.RECORD_SCRAPE:
        return "green"
    elif method in (MatchMethod.RECORD_MATCH, MatchMethod.WEB_SEARCH):
        return "yellow"
    elif method in (MatchMethod.FALLBACK, MatchMethod.ERROR):
        return "red"
    return "cyan"
