import asyncio
import inspect
import typer
import logging
from dotenv import load_dotenv
from InquirerPy import inquirer
from block_indexer.app.interface.tasks import TASKS


load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

app = typer.Typer()
indexer_app = typer.Typer(help="cli for indexing protocol data from blocks.")
app.add_typer(indexer_app, name="indexer")


def _block_selector(value: str) -> int | str:
    value = value.strip()
    return int(value) if value.isdigit() else value


@indexer_app.command("run")
def run() -> None:
    task_name = inquirer.select(
        message="Select task:",
        choices=list(TASKS.keys()),
        pointer="❯",
        instruction="Use ↑/↓ to move, Enter to select",
    ).execute()

    task = TASKS[task_name]

    kwargs: dict[str, object] = {}

    params = inspect.signature(task).parameters

    if "from_block" in params:
        kwargs["from_block"] = _block_selector(
            inquirer.text(
                message="From block (inclusive):",
                default="earliest",
            ).execute()
        )
    if "to_block" in params:
        kwargs["to_block"] = _block_selector(
            inquirer.text(
                message="To block (inclusive):",
                default="latest",
            ).execute()
        )

    asyncio.run(task(**kwargs))  # type: ignore


@indexer_app.command("init")
def init() -> None:
    """Create tables and views of the enabled protocols."""
    asyncio.run(TASKS["initialize_protocols_task"]())


@indexer_app.command("index")
def index(
    from_block: str = typer.Option("earliest", help="First block (number or 'earliest')."),
    to_block: str = typer.Option("latest", help="Last block (number or 'latest')."),
) -> None:
    """Index a block range without prompts."""
    asyncio.run(
        TASKS["index_blocks_task"](
            from_block=_block_selector(from_block),
            to_block=_block_selector(to_block),
        )
    )


if __name__ == "__main__":
    LOGO = r"""
      --- Block Indexer CLI ---
    """
    typer.echo(LOGO)
    app()
