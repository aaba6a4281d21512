# main.py

from tabular_qa.infrastructure.config import settings
from tabular_qa.infrastructure.container import build_container
from tabular_qa.interface.cli import (
    display_welcome_banner,
    display_indexing_status,
    prompt_for_query,
    display_answer,
    display_error,
    ask_continue,
)


def main() -> None:
    display_welcome_banner()

    # ── 1. Load the spreadsheet and build the index (once) ───────────────────
    container = build_container(settings)
    display_indexing_status(len(container.index), len(container.index.vocabulary))

    # ── 2. Interactive question loop ─────────────────────────────────────────
    while True:
        question = prompt_for_query()
        try:
            answer = container.router.answer(question)
            display_answer(question, answer)
        except Exception as error:
            print(f"[Main] Unexpected error while answering: {error!r}")
            display_error("Something went wrong while answering that question.")

        if not ask_continue():
            break


if __name__ == "__main__":
    main()
