"""LaTeX shortcut normalization for alphabet symbols and state labels."""

from __future__ import annotations

import re

GREEK_LETTER_NAMES = (
    "Alpha", "Beta", "Gamma", "Delta", "Epsilon", "Zeta", "Eta", "Theta",
    "Iota", "Kappa", "Lambda", "Mu", "Nu", "Xi", "Omicron", "Pi", "Rho",
    "Sigma", "Tau", "Upsilon", "Phi", "Chi", "Psi", "Omega",
)


def _greek_code_point(index: int, base: int) -> int:
    # Unicode leaves a hole after Rho (final sigma in lowercase)
    return base + index + (1 if index > 16 else 0)


def _build_shortcut_table() -> dict[str, str]:
    table = {}
    for index, name in enumerate(GREEK_LETTER_NAMES):
        table["\\" + name] = chr(_greek_code_point(index, 0x391))
        table["\\" + name.lower()] = chr(_greek_code_point(index, 0x3B1))
    for digit in range(10):
        table[f"_{digit}"] = chr(0x2080 + digit)
    return table


SHORTCUTS = _build_shortcut_table()

# Longest alternatives first so that no shortcut is shadowed by a prefix
SHORTCUT_PATTERN = re.compile(
    "|".join(re.escape(shortcut) for shortcut in sorted(SHORTCUTS, reverse=True))
)


def normalize(text: str) -> str:
    r"""Replace every LaTeX shortcut with the single character it stands for.

    Supported shortcuts are the Greek letter names (``\alpha``, ``\Omega``)
    and subscript digits (``_0`` to ``_9``).

    Args:
        text: Text that may contain shortcuts.

    Returns:
        str: Text where each shortcut is one character.

    Examples:
        normalize("\\alpha_1")  # "α₁"
        normalize("q_10")  # "q₁0"
    """
    return SHORTCUT_PATTERN.sub(lambda match: SHORTCUTS[match.group()], text)


def is_single_symbol(text: str) -> bool:
    """Check whether `text` is one character or exactly one shortcut."""
    return len(normalize(text)) == 1
