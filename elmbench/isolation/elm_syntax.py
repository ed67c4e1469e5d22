# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
A small, forgiving parser for the top of an Elm module.

We don't need a full Elm parser. To move a module into another namespace
we only have to know:
  - where the module name sits in the `module ... exposing (...)` header,
  - which modules the file imports, and where each imported name sits,
  - where the body starts, in case qualified references need rewriting.

Everything is recorded as character spans into the original text, and
rewriting splices replacements into exactly those spans. Whitespace,
comments, and the exposing lists are never re-generated, so odd formatting
survives untouched and a rewritten file re-parses to the new names.

The scanner understands just enough lexical structure to not be fooled:
line comments, nested block comments, and string/char literals.
"""

import re
from dataclasses import dataclass
from typing import Mapping, Optional

_UPPER_SEGMENT = re.compile(r"[A-Z][A-Za-z0-9_]*")
_IDENT_CHAR = re.compile(r"[A-Za-z0-9_']")


@dataclass(frozen=True)
class Span:
    """Half-open [start, end) character range into the source text."""

    start: int
    end: int


@dataclass(frozen=True)
class ModuleDeclaration:
    name: str
    name_span: Span
    kind: str
    exposing: str


@dataclass(frozen=True)
class ImportStatement:
    module: str
    module_span: Span
    alias: Optional[str]
    exposing: Optional[str]


@dataclass(frozen=True)
class ElmModuleHeader:
    """The parsed head of one Elm file."""

    declaration: Optional[ModuleDeclaration]
    imports: tuple[ImportStatement, ...]
    body_start: int

    @property
    def imported_modules(self) -> tuple[str, ...]:
        return tuple(statement.module for statement in self.imports)


class _Scanner:
    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def at_line_start(self) -> bool:
        return self.pos == 0 or self.text[self.pos - 1] == "\n"

    def skip_block_comment(self) -> None:
        depth = 0
        text = self.text
        while self.pos < len(text):
            if text.startswith("{-", self.pos):
                depth += 1
                self.pos += 2
            elif text.startswith("-}", self.pos):
                depth -= 1
                self.pos += 2
                if depth == 0:
                    return
            else:
                self.pos += 1

    def skip_line_comment(self) -> None:
        newline = self.text.find("\n", self.pos)
        self.pos = len(self.text) if newline == -1 else newline

    def skip_trivia(self) -> None:
        """Skip whitespace and comments."""
        text = self.text
        while self.pos < len(text):
            char = text[self.pos]
            if char.isspace():
                self.pos += 1
            elif text.startswith("--", self.pos):
                self.skip_line_comment()
            elif text.startswith("{-", self.pos):
                self.skip_block_comment()
            else:
                return

    def skip_string(self) -> None:
        text = self.text
        if text.startswith('"""', self.pos):
            end = text.find('"""', self.pos + 3)
            while end != -1 and _is_escaped(text, end):
                end = text.find('"""', end + 1)
            self.pos = len(text) if end == -1 else end + 3
            return

        quote = text[self.pos]
        self.pos += 1
        while self.pos < len(text):
            char = text[self.pos]
            if char == "\\":
                self.pos += 2
            elif char == quote or char == "\n":
                self.pos += 1
                return
            else:
                self.pos += 1

    def peek_keyword(self, keyword: str) -> bool:
        end = self.pos + len(keyword)
        if not self.text.startswith(keyword, self.pos):
            return False
        return end >= len(self.text) or not _IDENT_CHAR.match(self.text[end])

    def take_keyword(self, keyword: str) -> bool:
        if self.peek_keyword(keyword):
            self.pos += len(keyword)
            return True
        return False

    def take_module_name(self) -> Optional[tuple[str, Span]]:
        """Read a dotted module name like `Html.Attributes`."""
        start = self.pos
        segments: list[str] = []
        while True:
            match = _UPPER_SEGMENT.match(self.text, self.pos)
            if match is None:
                break
            segments.append(match.group(0))
            self.pos = match.end()
            if self.text.startswith(".", self.pos) and _UPPER_SEGMENT.match(self.text, self.pos + 1):
                self.pos += 1
                continue
            break

        if not segments:
            self.pos = start
            return None
        return ".".join(segments), Span(start, self.pos)

    def take_balanced(self, opener: str, closer: str) -> Optional[str]:
        """Read a bracketed group, nesting and comments included, verbatim."""
        if not self.text.startswith(opener, self.pos):
            return None
        start = self.pos
        depth = 0
        while self.pos < len(self.text):
            if self.text.startswith("{-", self.pos):
                self.skip_block_comment()
                continue
            if self.text.startswith("--", self.pos):
                self.skip_line_comment()
                continue
            char = self.text[self.pos]
            if char in "\"'":
                self.skip_string()
                continue
            self.pos += 1
            if char == opener:
                depth += 1
            elif char == closer:
                depth -= 1
                if depth == 0:
                    return self.text[start:self.pos]
        return None


def _is_escaped(text: str, index: int) -> bool:
    backslashes = 0
    index -= 1
    while index >= 0 and text[index] == "\\":
        backslashes += 1
        index -= 1
    return backslashes % 2 == 1


def _parse_exposing(scanner: _Scanner) -> Optional[str]:
    mark = scanner.pos
    scanner.skip_trivia()
    start = scanner.pos
    if not scanner.take_keyword("exposing"):
        scanner.pos = mark
        return None
    scanner.skip_trivia()
    if scanner.take_balanced("(", ")") is None:
        scanner.pos = mark
        return None
    return scanner.text[start:scanner.pos]


def _parse_declaration(scanner: _Scanner) -> Optional[ModuleDeclaration]:
    mark = scanner.pos
    kind = "module"
    if scanner.take_keyword("port"):
        kind = "port module"
        scanner.skip_trivia()
    elif scanner.take_keyword("effect"):
        kind = "effect module"
        scanner.skip_trivia()

    if not scanner.take_keyword("module"):
        scanner.pos = mark
        return None

    scanner.skip_trivia()
    name = scanner.take_module_name()
    if name is None:
        scanner.pos = mark
        return None

    if kind == "effect module":
        where_mark = scanner.pos
        scanner.skip_trivia()
        if scanner.take_keyword("where"):
            scanner.skip_trivia()
            scanner.take_balanced("{", "}")
        else:
            scanner.pos = where_mark

    exposing = _parse_exposing(scanner) or ""
    return ModuleDeclaration(name=name[0], name_span=name[1], kind=kind, exposing=exposing)


def _parse_import(scanner: _Scanner) -> Optional[ImportStatement]:
    mark = scanner.pos
    if not (scanner.at_line_start() and scanner.take_keyword("import")):
        return None

    scanner.skip_trivia()
    name = scanner.take_module_name()
    if name is None:
        scanner.pos = mark
        return None

    alias = None
    alias_mark = scanner.pos
    scanner.skip_trivia()
    if scanner.take_keyword("as"):
        scanner.skip_trivia()
        match = _UPPER_SEGMENT.match(scanner.text, scanner.pos)
        if match is None:
            scanner.pos = mark
            return None
        alias = match.group(0)
        scanner.pos = match.end()
    else:
        scanner.pos = alias_mark

    exposing = _parse_exposing(scanner)
    return ImportStatement(module=name[0], module_span=name[1], alias=alias, exposing=exposing)


def parse_header(text: str) -> ElmModuleHeader:
    """
    Parse the module declaration and import block of an Elm source file.

    Never raises on odd input. A file that doesn't start with a recognizable
    declaration gets `declaration=None`; the import block ends at the first
    thing that isn't an import.
    """
    scanner = _Scanner(text)
    scanner.skip_trivia()
    declaration = _parse_declaration(scanner)

    imports: list[ImportStatement] = []
    body_start = scanner.pos
    while True:
        scanner.skip_trivia()
        statement = _parse_import(scanner)
        if statement is None:
            break
        imports.append(statement)
        body_start = scanner.pos

    return ElmModuleHeader(
        declaration=declaration,
        imports=tuple(imports),
        body_start=body_start,
    )


def _qualified_reference_edits(
    text: str,
    start: int,
    renames: Mapping[str, str],
) -> list[tuple[Span, str]]:
    """
    Find `Old.Module.value` style references in the body and plan their
    rewrite. Strings and comments are skipped.
    """
    edits: list[tuple[Span, str]] = []
    if not renames:
        return edits

    scanner = _Scanner(text, start)
    while not scanner.at_end():
        char = text[scanner.pos]
        if text.startswith("--", scanner.pos):
            scanner.skip_line_comment()
            continue
        if text.startswith("{-", scanner.pos):
            scanner.skip_block_comment()
            continue
        if char in "\"'":
            previous = text[scanner.pos - 1] if scanner.pos > 0 else ""
            if char == "'" and _IDENT_CHAR.match(previous or " "):
                scanner.pos += 1
                continue
            scanner.skip_string()
            continue

        previous = text[scanner.pos - 1] if scanner.pos > 0 else ""
        if _UPPER_SEGMENT.match(char) and not (previous and (_IDENT_CHAR.match(previous) or previous == ".")):
            chain_start = scanner.pos
            found = scanner.take_module_name()
            if found is None:
                scanner.pos += 1
                continue
            name, _ = found
            segments = name.split(".")
            if text.startswith(".", scanner.pos) and scanner.pos + 1 < len(text) and (
                text[scanner.pos + 1].islower() or text[scanner.pos + 1] == "_"
            ):
                qualifier = segments
            else:
                qualifier = segments[:-1]

            qualified = ".".join(qualifier)
            if qualified in renames:
                edits.append(
                    (Span(chain_start, chain_start + len(qualified)), renames[qualified])
                )
            continue

        if _IDENT_CHAR.match(char):
            while scanner.pos < len(text) and _IDENT_CHAR.match(text[scanner.pos]):
                scanner.pos += 1
            continue

        scanner.pos += 1

    return edits


def apply_edits(text: str, edits: list[tuple[Span, str]]) -> str:
    """Splice replacements into `text`. Spans must not overlap."""
    pieces: list[str] = []
    cursor = 0
    for span, replacement in sorted(edits, key=lambda edit: edit[0].start):
        if span.start < cursor:
            raise ValueError(f"Overlapping edit at offset {span.start}")
        pieces.append(text[cursor:span.start])
        pieces.append(replacement)
        cursor = span.end
    pieces.append(text[cursor:])
    return "".join(pieces)


def rename_module(
    text: str,
    new_name: str,
    import_renames: Mapping[str, str],
    header: Optional[ElmModuleHeader] = None,
) -> str:
    """
    Move an Elm module into a new namespace.

    - The declared name becomes `new_name`; the exposing list is left as is.
    - Every import found in `import_renames` is pointed at its new name.
      An import without `as` keeps its old qualifier working: single-segment
      names get an alias (`import Version.Old.Utils as Utils`), dotted names
      (which Elm can't alias to) have their qualified uses in the body
      rewritten instead.
    - Imports not in `import_renames` are left alone.

    Raises:
        ValueError: If the text has no module declaration.
    """
    if header is None:
        header = parse_header(text)
    if header.declaration is None:
        raise ValueError("Source has no module declaration")

    edits: list[tuple[Span, str]] = [(header.declaration.name_span, new_name)]
    body_renames: dict[str, str] = {}

    for statement in header.imports:
        target = import_renames.get(statement.module)
        if target is None:
            continue
        if statement.alias is not None:
            edits.append((statement.module_span, target))
        elif "." not in statement.module:
            edits.append((statement.module_span, f"{target} as {statement.module}"))
        else:
            edits.append((statement.module_span, target))
            body_renames[statement.module] = target

    edits.extend(_qualified_reference_edits(text, header.body_start, body_renames))
    return apply_edits(text, edits)
