"""Follow-up classification policies."""

from dataclasses import dataclass, field

from finch.agents.types import FollowupClassifier

RESET_COMMAND = "reset"


@dataclass
class FollowupConfig:
    """
    Word lists for keyword-based follow-up detection.
    """

    affirmations: frozenset[str] = field(
        default_factory=lambda: frozenset(
            {
                "y",
                "yes",
                "yeah",
                "yup",
                "sure",
                "ok",
                "okay",
                "please",
                "do it",
                "go ahead",
            }
        )
    )
    hints: tuple[str, ...] = (
        "detail",
        "details",
        "report",
        "list",
        "show",
        "view",
        "csv",
        "export",
        "download",
        "chart",
        "png",
        "image",
        "graph",
        "compare",
        "last week",
        "week",
        "draft",
        "send",
    )


class KeywordFollowupClassifier(FollowupClassifier):
    """
    Heuristic classifier: exact affirmations, then substring hint tokens.
    """

    def __init__(self, config: FollowupConfig | None = None) -> None:
        """
        Initialize the KeywordFollowupClassifier.

        Args:
            config (FollowupConfig | None, optional): Word lists to match against. Defaults to None.
        """
        self.config = config or FollowupConfig()

    def classify(self, text: str) -> bool:
        """
        Decide whether the text continues the previous exchange.

        Args:
            text (str): Raw user input.

        Returns:
            bool: True for an affirmation or a hint-token match, False otherwise
            (including empty input).
        """
        t = (text or "").strip().lower()
        if not t:
            return False
        if t in self.config.affirmations:
            return True
        return any(hint in t for hint in self.config.hints)


def is_reset_command(text: str) -> bool:
    """
    Return True when the input is the explicit reset command.

    Args:
        text (str): Raw user input.

    Returns:
        bool: Whether the trimmed, lower-cased input equals ``reset``.
    """
    return (text or "").strip().lower() == RESET_COMMAND
