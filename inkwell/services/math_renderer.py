"""Math-notation rendering for $$...$$ spans in article text"""

from __future__ import annotations

import logging
import re
from typing import Protocol

import latex2mathml.converter
from markupsafe import escape

from inkwell.config.settings import settings

logger = logging.getLogger(__name__)

MATH_SPAN_RE = re.compile(r"\$\$(.+?)\$\$", re.DOTALL)


class MathSyntaxError(ValueError):
    """Raised when a math span cannot be parsed."""


class MathRenderer(Protocol):
    def render(self, tex: str) -> str:
        ...


# Commands whose required arguments latex2mathml does not enforce
COMMAND_ARITY = {
    "frac": 2,
    "dfrac": 2,
    "tfrac": 2,
    "cfrac": 2,
    "binom": 2,
    "sqrt": 1,
    "overline": 1,
    "underline": 1,
    "hat": 1,
    "bar": 1,
    "vec": 1,
    "text": 1,
    "mathrm": 1,
    "mathbf": 1,
}


def _matching_brace(tex: str, start: int) -> int:
    depth = 0
    i = start
    while i < len(tex):
        ch = tex[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise MathSyntaxError("unmatched '{'")


def _argument(tex: str, i: int, owner: str) -> int:
    while i < len(tex) and tex[i].isspace():
        i += 1
    if i >= len(tex) or tex[i] in "}^_&":
        raise MathSyntaxError(f"{owner} is missing an argument")
    if tex[i] == "{":
        end = _matching_brace(tex, i)
        check_tex(tex[i + 1:end])
        return end + 1
    if tex[i] == "\\":
        return _command(tex, i)
    return i + 1


def _command(tex: str, i: int) -> int:
    """Consume `\\name` plus its required arguments; returns the next index."""
    start = i + 1
    if start >= len(tex):
        raise MathSyntaxError("trailing backslash")
    end = start
    while end < len(tex) and tex[end].isalpha():
        end += 1
    if end == start:
        # Control symbol such as \{ or \,
        return start + 1

    name = tex[start:end]
    i = end
    if name == "sqrt":
        cursor = i
        while cursor < len(tex) and tex[cursor].isspace():
            cursor += 1
        if cursor < len(tex) and tex[cursor] == "[":
            close = tex.find("]", cursor)
            if close == -1:
                raise MathSyntaxError("\\sqrt has an unclosed '['")
            i = close + 1
    for _ in range(COMMAND_ARITY.get(name, 0)):
        i = _argument(tex, i, f"\\{name}")
    return i


def check_tex(tex: str) -> None:
    """
    Structural check of a TeX fragment

    Braces must balance, `^`/`_` need an operand, and commands listed in
    COMMAND_ARITY need all their arguments.

    Raises:
        MathSyntaxError: the fragment is malformed
    """
    i = 0
    while i < len(tex):
        ch = tex[i]
        if ch == "\\":
            i = _command(tex, i)
        elif ch in "^_":
            i = _argument(tex, i + 1, f"'{ch}'")
        elif ch == "{":
            end = _matching_brace(tex, i)
            check_tex(tex[i + 1:end])
            i = end + 1
        elif ch == "}":
            raise MathSyntaxError("unmatched '}'")
        else:
            i += 1


class MathMLRenderer:
    """Renders TeX to MathML with latex2mathml."""

    def __init__(self, display: str | None = None) -> None:
        self.display = display or settings.MATH_DISPLAY

    def render(self, tex: str) -> str:
        # latex2mathml silently accepts unbalanced braces and missing arguments
        check_tex(tex)
        try:
            return latex2mathml.converter.convert(tex.strip(), display=self.display)
        except Exception as exc:
            # latex2mathml reports malformed input through many unrelated exception types
            raise MathSyntaxError(f"{type(exc).__name__}: {exc}") from exc


def has_math(text: str | None) -> bool:
    return bool(text) and MATH_SPAN_RE.search(text) is not None


def render_text(text: str | None, renderer: MathRenderer) -> str | None:
    """
    Render every $$...$$ span in `text`

    Text between spans is HTML-escaped so the result can be embedded as-is.

    Returns:
        Rendered HTML, or None when `text` has no math span

    Raises:
        MathSyntaxError: a span failed to render
    """
    if not has_math(text):
        return None

    parts: list[str] = []
    position = 0
    for match in MATH_SPAN_RE.finditer(text):
        parts.append(str(escape(text[position:match.start()])))
        parts.append(renderer.render(match.group(1)))
        position = match.end()
    parts.append(str(escape(text[position:])))

    logger.debug(f"Rendered math spans in {len(text)} chars of text")
    return "".join(parts)
