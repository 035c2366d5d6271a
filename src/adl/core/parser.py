"""
Parser entry points for ADL source files.
"""

import logging
from pathlib import Path

from . import ir
from .errors import AdlError
from .parser_impl import parse_adl

logger = logging.getLogger(__name__)


def parse_file(path: Path) -> ir.AdlProgram:
    """
    Read and parse one ADL file.

    Args:
        path: Path to an .adl file

    Returns:
        The parsed program

    Raises:
        AdlError: If the file cannot be read
        ParseError: If the content is not valid ADL
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise AdlError(f"Cannot read {path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise AdlError(f"Cannot read {path}: not valid UTF-8 ({e.reason} at byte {e.start})") from e

    program = parse_adl(text, file=path)
    logger.info("Parsed %s: %s", path, program.tag_counts())
    return program


__all__ = ["parse_adl", "parse_file"]
