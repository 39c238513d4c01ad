import logging
import sys

from titan_terminal.utils.logging_redaction import install_redaction_filter


def setup_logging(level: str = "INFO") -> None:
    """
    Configure centralized application logging.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    install_redaction_filter()

    # Per-tick debug output from the stream is noisy outside development
    if level.upper() != "DEBUG":
        logging.getLogger("titan_terminal.infrastructure.market_data").setLevel(logging.INFO)