import sys
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from finch.agents import ConversationOrchestrator, ExportError, Turn, default_orchestrator
from finch.utils.env_cfg import load_path_env
from finch.utils.logging_cfg import setup_logging

QUIT_COMMANDS = {":q", ":quit", "exit", "quit"}
EXPORT_COMMAND = ":export"


def _print_turn(turn: Turn) -> None:
    """
    Prints an agent turn with its attachments.

    Args:
        turn (Turn): The agent turn to print.
    """
    print(f"agent> {turn.text}")
    if turn.chart_reference:
        print(f"  chart: {turn.chart_reference}")
    if turn.export_reference:
        print(f"  csv available, type {EXPORT_COMMAND} to download")


def _print_followups(followups: list[str]) -> None:
    for index, label in enumerate(followups, start=1):
        print(f"  [{index}] {label}")


def _last_exportable(orch: ConversationOrchestrator) -> Turn | None:
    for turn in reversed(orch.session.history):
        if turn.role == "agent" and turn.export_reference:
            return turn
    return None


def save_export(orch: ConversationOrchestrator, output_path: str | Path) -> Path | None:
    """
    Replays the most recent export and writes it to the output directory.

    Args:
        orch (ConversationOrchestrator): The conversation to export from.
        output_path (str | Path): The directory to store the file in.

    Returns:
        Path | None: The written file, or None if nothing was exported.
    """
    turn = _last_exportable(orch)
    if turn is None:
        print("Nothing to export yet.")
        return None
    try:
        exported = orch.export(turn)
    except ExportError as e:
        print(f"Export failed: {e}")
        return None

    if not isinstance(output_path, Path):
        output_path = Path(output_path).expanduser()
    if not output_path.exists():
        logger.info("Creating output directory at {}", output_path)
        output_path.mkdir(parents=True, exist_ok=True)

    name = Path(exported.filename).name
    if name in ("", ".", ".."):
        name = orch.exporter.default_filename
    target = output_path / name
    target.write_bytes(exported.content)
    logger.info("Export stored in {}", target)
    print(f"Saved {target}")
    return target


def handle_line(orch: ConversationOrchestrator, line: str, output_path: str | Path) -> bool:
    """
    Handles one line of REPL input.

    Args:
        orch (ConversationOrchestrator): The conversation.
        line (str): Raw input.
        output_path (str | Path): Directory for exported files.

    Returns:
        bool: False when the REPL should stop.
    """
    text = line.strip()
    if text.lower() in QUIT_COMMANDS:
        return False
    if text.lower() == EXPORT_COMMAND:
        save_export(orch, output_path)
        return True

    followups = orch.followups
    if text.isdigit() and 1 <= int(text) <= len(followups):
        turn = orch.send_followup(followups[int(text) - 1])
    else:
        turn = orch.send(text)

    if turn is not None:
        _print_turn(turn)
        _print_followups(orch.followups)
    return True


def main() -> None:
    """
    Main entry point for the CLI. Starts a conversation and reads questions until EOF or quit.
    """
    load_dotenv()
    setup_logging()
    orch = default_orchestrator()
    exports_dir = load_path_env().exports
    print(
        f"Finch agent (company {orch.session.company_id}). "
        f"Type 'reset' to start over, {EXPORT_COMMAND} to save a CSV, :quit to leave."
    )
    while True:
        try:
            line = input("you> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not handle_line(orch, line, exports_dir):
            break
    logger.info("Conversation closed.")


if __name__ == "__main__":
    sys.path.append(str(Path(__file__).parents[2].resolve()))
    main()
