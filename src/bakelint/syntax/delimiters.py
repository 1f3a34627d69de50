"""Balanced-delimiter scanning and textual type-alias shape extraction."""

from __future__ import annotations

import re
from dataclasses import dataclass

_OPENERS = {"{": "}", "[": "]", "(": ")", "<": ">"}
_CLOSERS = frozenset(_OPENERS.values())

_LINE_COMMENT_RE = re.compile(r"//[^\n]*")
_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)

# A member starts with an optional ``readonly``, a key, an optional ``?`` and a colon.
_MEMBER_START_RE = re.compile(r"(?:readonly\s+)?(?:[A-Za-z_$][\w$]*|'[^']*'|\"[^\"]*\")\??\s*:")
_MEMBER_RE = re.compile(
    r"^(?:readonly\s+)?([A-Za-z_$][\w$]*|'[^']*'|\"[^\"]*\")(\?)?\s*:\s*(.+)$",
    re.DOTALL,
)


@dataclass(frozen=True)
class TypeProperty:
    """One ``name: type`` member of an object type, as written."""

    name: str
    type_text: str
    optional: bool = False


@dataclass(frozen=True)
class TypeAliasDescriptor:
    """Ordered member list of ``export type <alias> = { ... }``."""

    alias: str
    properties: tuple[TypeProperty, ...]

    @property
    def names(self) -> list[str]:
        return [prop.name for prop in self.properties]

    def get(self, name: str) -> TypeProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


def find_matching_close(text: str, open_index: int, open_char: str = "{") -> int | None:
    """Return the index of the delimiter closing the one at *open_index*.

    Plain depth counting over *open_char* and its partner; any other characters
    (including delimiters of other kinds) are ignored.  Returns ``None`` when
    *open_index* does not hold *open_char* or the text ends before the
    delimiter is closed.
    """
    if open_index < 0 or open_index >= len(text) or text[open_index] != open_char:
        return None
    close_char = _OPENERS[open_char]
    depth = 0
    for idx in range(open_index, len(text)):
        char = text[idx]
        if char == open_char:
            depth += 1
        elif char == close_char:
            depth -= 1
            if depth == 0:
                return idx
    return None


def extract_balanced(text: str, open_index: int, open_char: str = "{") -> str | None:
    """Return the text strictly between the delimiter at *open_index* and its match."""
    close_index = find_matching_close(text, open_index, open_char)
    if close_index is None:
        return None
    return text[open_index + 1 : close_index]


def _alias_start_re(alias: str, *, require_export: bool = True) -> re.Pattern[str]:
    keyword = r"export\s+type\s+" if require_export else r"(?<![\w$])(?:export\s+)?type\s+"
    return re.compile(
        keyword + re.escape(alias) + r"\b\s*(?:<[^=]*>)?\s*=\s*\{",
    )


def _strip_comments(text: str) -> str:
    return _LINE_COMMENT_RE.sub("", _BLOCK_COMMENT_RE.sub("", text))


def split_members(body: str) -> list[str]:
    """Split an object-type body into its depth-0 member segments.

    Members end at ``;`` or ``,`` outside any bracket, or at a newline when the
    next line starts a new ``name:`` member.  ``=>`` is not treated as a
    closing angle bracket.
    """
    segments: list[str] = []
    current: list[str] = []
    depth = 0
    prev = ""
    for idx, char in enumerate(body):
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS and not (char == ">" and prev == "="):
            depth = max(depth - 1, 0)

        if depth == 0 and char in ";,":
            segments.append("".join(current))
            current = []
        elif depth == 0 and char == "\n":
            pending = "".join(current)
            rest = body[idx + 1 :].lstrip()
            if ":" in pending and _MEMBER_START_RE.match(rest):
                segments.append(pending)
                current = []
            else:
                current.append(char)
        else:
            current.append(char)
        if not char.isspace():
            prev = char
    segments.append("".join(current))
    return [seg.strip() for seg in segments if seg.strip()]


def type_alias_shape(
    text: str, alias: str, *, require_export: bool = True
) -> TypeAliasDescriptor | None:
    """Extract the member shape of ``export type <alias> = { ... }`` from raw text.

    With *require_export* false a module-local ``type <alias> = { ... }`` matches too.

    Returns ``None`` when the alias is absent, is not an object type, or its
    braces never balance.  Nested object types are kept verbatim as the
    owning member's ``type_text``.
    """
    match = _alias_start_re(alias, require_export=require_export).search(text)
    if match is None:
        return None
    body = extract_balanced(text, match.end() - 1)
    if body is None:
        return None

    properties: list[TypeProperty] = []
    for segment in split_members(_strip_comments(body)):
        member = _MEMBER_RE.match(segment)
        if member is None:
            continue
        name = member.group(1).strip("'\"")
        properties.append(
            TypeProperty(
                name=name,
                type_text=member.group(3).strip(),
                optional=member.group(2) is not None,
            )
        )
    return TypeAliasDescriptor(alias=alias, properties=tuple(properties))
