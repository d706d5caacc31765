"""Toolpath line parser.

Turns one raw line of G-code into a ``Command``::

    "G1 X10.5 Y-2 E0.03 ; perimeter"  ->  Command("G1", (("X", 10.5), ("Y", -2.0), ("E", 0.03)))

Rules:
    - Comments are stripped first: everything after the comment marker
      (``;`` by default) and any ``( ... )`` group.  A blank or
      all-comment line yields ``None``.
    - A leading ``N<digits>`` line-number word and a trailing ``*<digits>``
      checksum are dropped.
    - The first token is the mnemonic.  Leading zeros in its number are
      collapsed (``G01`` -> ``G1``) and letters are upper-cased.
    - Every further token is a single letter optionally followed by a
      signed decimal number.  A bare letter has value ``None``.  Anything
      else raises ``ParseError`` -- malformed numbers are never read as 0.
    - Numbers that overflow to infinity or exceed ``MAX_WORD_VALUE`` in
      magnitude raise ``ParseError`` as well.
"""

from __future__ import annotations

import logging
import math
import re

from toolpath_raster.errors import ParseError
from toolpath_raster.gcode.commands import Command, Parameter

logger = logging.getLogger(__name__)

# Accepts numbers like X.5, X-3., X1e-3 (leading/trailing decimal point).
WORD_PATTERN = re.compile(
    r"^([A-Z])([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)?$"
)
MNEMONIC_PATTERN = re.compile(r"^([A-Z])0*(\d+)((?:\.\d+)?)$")
LINE_NUMBER_PATTERN = re.compile(r"^N\d+$")
PAREN_COMMENT_PATTERN = re.compile(r"\([^)]*\)")
CHECKSUM_PATTERN = re.compile(r"\*\d+\s*$")

# Larger magnitudes would overflow once scaled to raster units.
MAX_WORD_VALUE = 1e12


def strip_comment(line: str, marker: str = ";") -> str:
    """Remove comments and surrounding whitespace from *line*.

    Parameters
    ----------
    line : str
        Raw source line (newline allowed).
    marker : str
        Single-character end-of-line comment marker.

    Returns
    -------
    str
        Command text, ``""`` for blank or all-comment lines.
    """
    cut = line.find(marker)
    if cut != -1:
        line = line[:cut]
    if "(" in line:
        line = PAREN_COMMENT_PATTERN.sub(" ", line)
    return line.strip()


def normalize_mnemonic(token: str) -> str:
    """Upper-case *token* and collapse leading zeros (``g01`` -> ``G1``)."""
    token = token.upper()
    match = MNEMONIC_PATTERN.match(token)
    if match is None:
        return token
    letter, number, fraction = match.groups()
    return f"{letter}{int(number)}{fraction}"


def parse_word(token: str, line_number: int = 0) -> Parameter:
    """Parse one parameter token into ``(letter, value | None)``.

    Raises
    ------
    ParseError
        If the token is not a letter optionally followed by a number, or
        the number is not finite or exceeds ``MAX_WORD_VALUE`` in magnitude.
    """
    match = WORD_PATTERN.match(token.upper())
    if match is None:
        raise ParseError(
            f"Malformed parameter '{token}'", line_number=line_number, token=token
        )
    letter, number = match.groups()
    if number is None:
        return letter, None
    value = float(number)
    if not math.isfinite(value) or abs(value) > MAX_WORD_VALUE:
        raise ParseError(
            f"Value out of range '{token}'", line_number=line_number, token=token
        )
    return letter, value


def parse_line(
    line: str,
    line_number: int = 0,
    comment_marker: str = ";",
) -> Command | None:
    """Parse one raw toolpath line.

    Parameters
    ----------
    line : str
        Raw source line.
    line_number : int
        1-based line number for error reporting (0 when unknown).
    comment_marker : str
        End-of-line comment marker, default ``;``.

    Returns
    -------
    Command | None
        Parsed command, or ``None`` for blank / comment-only lines.

    Raises
    ------
    ParseError
        On a malformed parameter word.
    """
    text = strip_comment(line, comment_marker)
    if not text:
        return None
    text = CHECKSUM_PATTERN.sub("", text).strip()

    tokens = text.split()
    if tokens and LINE_NUMBER_PATTERN.match(tokens[0].upper()):
        tokens = tokens[1:]
    if not tokens:
        return None

    mnemonic = normalize_mnemonic(tokens[0])
    parameters = tuple(parse_word(tok, line_number) for tok in tokens[1:])
    return Command(
        mnemonic=mnemonic,
        parameters=parameters,
        line_number=line_number,
        raw=text,
    )
