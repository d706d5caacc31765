"""Command and axis value types -- the vocabulary between parser and interpreter.

Every parsed line becomes an immutable, slotted ``Command``.  Motion
handlers project a command onto ``Axes``, where each letter is either a
float or ``None``.  ``None`` means *the letter was not given* (or was given
without a number) and is never the same as ``0.0``: ``G1 X0`` moves to
X=0, ``G1 Y5`` leaves X where it was.
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------

Parameter = tuple[str, "float | None"]
"""One ``(letter, value)`` word; value is ``None`` for a bare letter."""


# ---------------------------------------------------------------------------
# Command
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Command:
    """One parsed toolpath line.

    Parameters
    ----------
    mnemonic : str
        Normalized command word, e.g. ``"G1"`` or ``"M104"``.
    parameters : tuple[Parameter, ...]
        Words following the mnemonic, in source order.
    line_number : int
        1-based source line, 0 when unknown.
    raw : str
        Source text after comment stripping.
    """

    mnemonic: str
    parameters: tuple[Parameter, ...] = ()
    line_number: int = 0
    raw: str = ""

    def has(self, letter: str) -> bool:
        """True if *letter* appears at all, with or without a value."""
        letter = letter.upper()
        return any(name == letter for name, _ in self.parameters)

    def get(self, letter: str, default: float | None = None) -> float | None:
        """Value of the last occurrence of *letter*, or *default*.

        A bare letter yields ``None`` (not *default*): the letter is
        present but carries no number.
        """
        letter = letter.upper()
        found = False
        value: float | None = None
        for name, val in self.parameters:
            if name == letter:
                found = True
                value = val
        return value if found else default

    def __str__(self) -> str:
        return self.raw or self.mnemonic


# ---------------------------------------------------------------------------
# Axes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Axes:
    """Axis words of a motion command.

    Parameters
    ----------
    x, y, z : float | None
        Target position in mm; ``None`` when absent.
    e : float | None
        Extrusion amount; reporting only.
    feedrate : float | None
        ``F`` word (mm/min); reporting only.
    """

    x: float | None = None
    y: float | None = None
    z: float | None = None
    e: float | None = None
    feedrate: float | None = None

    @classmethod
    def from_command(cls, command: Command) -> Axes:
        """Project X/Y/Z/E/F words of *command*; other letters are ignored."""
        return cls(
            x=command.get("X"),
            y=command.get("Y"),
            z=command.get("Z"),
            e=command.get("E"),
            feedrate=command.get("F"),
        )

    def is_empty(self) -> bool:
        return all(
            v is None for v in (self.x, self.y, self.z, self.e, self.feedrate)
        )

    def describe(self) -> str:
        """Compact ``X10.0 Y5.0`` rendering of the present words."""
        words = [
            f"{letter}{value:g}"
            for letter, value in (
                ("X", self.x), ("Y", self.y), ("Z", self.z),
                ("E", self.e), ("F", self.feedrate),
            )
            if value is not None
        ]
        return " ".join(words) if words else "-"
