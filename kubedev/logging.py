import logging

from .config import get_settings


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging from settings (DEBUG when verbose)."""
    settings = get_settings()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
