import logging
from typing import List


def format_duration(seconds: float) -> str:
    """
    Format a duration in seconds to a human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"


def set_logging_level(verbose: bool = False):
    """Set the package logging level based on verbose flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=logging.WARNING, format='%(levelname)s %(name)s: %(message)s')
    logging.getLogger('deadlink_checker').setLevel(level)


def load_urls_from_file(filepath: str) -> List[str]:
    """
    Load URLs from a text file, one per line.

    Blank lines and lines starting with '#' are skipped.

    Args:
        filepath: Path to the file

    Returns:
        List of URLs in file order
    """
    urls = []
    with open(filepath, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#'):
                urls.append(line)
    return urls
