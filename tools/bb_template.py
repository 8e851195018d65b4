"""Deferred command templates.

A template is built once from tokens that may embed printf-style
placeholders ("compile %s", "-O%d") and expanded later, possibly many
times, with the concrete values.  Tokens are parsed into literal text and
typed placeholders when appended, so expansion only walks the parts and
checks each value against its conversion.

A "%" that does not start a recognised conversion is kept as literal
text; "%%" is a single literal "%".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

# The space flag is left out: spaces separate tokens.
_PLACEHOLDER_RE = re.compile(
    r"%(?:%|[-+#0]*\d*(?:\.\d+)?[hlL]*[diouxXeEfFgGcrsa])"
)

_INT_CONVERSIONS = frozenset("diouxX")
_FLOAT_CONVERSIONS = frozenset("eEfFgG")
_NO_LENGTH = str.maketrans("", "", "hlL")


class TemplateError(ValueError):
    """Values do not match the placeholders of a template."""


@dataclass(frozen=True)
class Placeholder:
    """A single conversion such as ``%s``, ``%ld`` or ``%-8.3f``."""
    spec: str

    @property
    def conversion(self) -> str:
        return self.spec[-1]

    def render(self, value) -> str:
        conv = self.conversion
        if conv == "c" and not (
            isinstance(value, int) or (isinstance(value, str) and len(value) == 1)
        ):
            raise TemplateError(
                f"{self.spec} expects an int or a single character, "
                f"got {value!r}"
            )
        if conv in _INT_CONVERSIONS and not isinstance(value, int):
            raise TemplateError(
                f"{self.spec} expects an int, got {type(value).__name__}"
            )
        if conv in _FLOAT_CONVERSIONS and not isinstance(value, (int, float)):
            raise TemplateError(
                f"{self.spec} expects a number, got {type(value).__name__}"
            )
        # Length modifiers carry no meaning for Python values.
        return self.spec.translate(_NO_LENGTH) % (value,)


def parse_token(token: str) -> list:
    """Split *token* into literal strings and Placeholder parts."""
    parts: list = []
    literal = []
    pos = 0
    for m in _PLACEHOLDER_RE.finditer(token):
        literal.append(token[pos:m.start()])
        pos = m.end()
        if m.group() == "%%":
            literal.append("%")
            continue
        text = "".join(literal)
        if text:
            parts.append(text)
        literal = []
        parts.append(Placeholder(m.group()))
    literal.append(token[pos:])
    text = "".join(literal)
    if text:
        parts.append(text)
    return parts


class Template:
    """Append-only, space-joined token buffer with deferred placeholders.

    An empty token is kept once the template holds a token, so "a", "",
    "b" renders as "a  b" and tokenizes back to three arguments.  Empty
    tokens before the first token and after the last non-empty one are
    not rendered, so the line never starts or ends with a separator.
    """

    def __init__(self, tokens: Sequence[str] = ()):
        self._tokens: list[str] = []
        self._parsed: list[list] = []
        self.append(*tokens)

    def append(self, *tokens: str) -> int:
        """Append whole tokens, skipping leading empty ones.

        Returns how many tokens were actually appended.
        """
        appended = 0
        for token in tokens:
            if token is None:
                raise TypeError("template tokens must not be None")
            if not isinstance(token, str):
                raise TypeError(
                    f"template tokens must be str, got {type(token).__name__}"
                )
            if not token and not self._tokens:
                continue
            self._tokens.append(token)
            self._parsed.append(parse_token(token))
            appended += 1
        return appended

    def _rendered(self) -> int:
        end = len(self._tokens)
        while end and not self._tokens[end - 1]:
            end -= 1
        return end

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(self._tokens[:self._rendered()])

    @property
    def placeholders(self) -> int:
        return sum(
            1
            for parts in self._parsed[:self._rendered()]
            for p in parts
            if isinstance(p, Placeholder)
        )

    def expand_prefix(self, values: Sequence) -> tuple[str, tuple]:
        """Expand using the leading values; return the line and the rest."""
        out = []
        used = 0
        for i, parts in enumerate(self._parsed[:self._rendered()]):
            if i:
                out.append(" ")
            for part in parts:
                if isinstance(part, Placeholder):
                    if used >= len(values):
                        raise TemplateError(
                            f"not enough values for {str(self)!r}: "
                            f"needs {self.placeholders}, got {len(values)}"
                        )
                    out.append(part.render(values[used]))
                    used += 1
                else:
                    out.append(part)
        return "".join(out), tuple(values[used:])

    def expand(self, *values) -> str:
        line, rest = self.expand_prefix(values)
        if rest:
            raise TemplateError(
                f"too many values for {str(self)!r}: "
                f"needs {self.placeholders}, got {len(values)}"
            )
        return line

    def __bool__(self) -> bool:
        return bool(self._tokens)

    def __str__(self) -> str:
        return " ".join(self.tokens)

    def __repr__(self) -> str:
        return f"Template({str(self)!r})"


def escape(text: str) -> str:
    """Quote *text* so that expansion reproduces it verbatim."""
    return text.replace("%", "%%")


def tokenize(line: str) -> list[str]:
    """Split an expanded line on the ASCII space character.

    No quoting, escaping or collapsing: "a  b" gives ["a", "", "b"], and an
    argument that contains a space cannot be expressed.  An empty line
    gives no tokens.
    """
    if not line:
        return []
    return line.split(" ")
