"""Lexical entity extractor for TypeScript / JavaScript source text.

The extractor is deliberately line-oriented: it applies regular expressions
to physical lines and tracks brace depth to find class and interface bodies.
It is not a compiler front end:

- A function is only recognised when it carries an explicit ``: ReturnType``
  annotation. Unannotated functions are missed rather than guessed at.
- Parameter lists are split on every comma, so generic or function-typed
  parameters containing commas are split incorrectly.
- Brace counting skips string literals and ``//`` comments that sit on a
  single line, but not block comments or template literals spanning lines.

Extraction never raises; a construct that cannot be matched is simply absent
from the result.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set, Tuple, TypeVar

from .models import (
    ClassEntity,
    FunctionEntity,
    InterfaceEntity,
    MethodEntity,
    Parameter,
    Property,
    TypeEntity,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_IDENT = r"[A-Za-z_$][\w$]*"
_GENERICS = r"(?:<[^>(]*>)?"

# ---------------------------------------------------------------------------
# Top-level declaration patterns
# ---------------------------------------------------------------------------
_FUNCTION_RE = re.compile(
    rf"^\s*(export\s+)?(?:default\s+)?(async\s+)?function\s*\*?\s*({_IDENT})\s*{_GENERICS}"
    r"\s*\(([^)]*)\)\s*:\s*([^{]+)"
)
_ARROW_RE = re.compile(
    rf"^\s*(export\s+)?(?:const|let|var)\s+({_IDENT})\s*=\s*(async\s+)?{_GENERICS}"
    r"\(([^)]*)\)\s*:\s*([^{=]+)"
)
_BARE_METHOD_RE = re.compile(
    rf"^\s*(async\s+)?({_IDENT})\s*{_GENERICS}\(([^)]*)\)\s*:\s*([^{{;]+)"
)
_CLASS_RE = re.compile(
    rf"^\s*(export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+({_IDENT}){_GENERICS}"
    rf"(?:\s+extends\s+({_IDENT}(?:\.{_IDENT})*){_GENERICS})?"
    r"(?:\s+implements\s+([^{]+))?\s*\{"
)
_INTERFACE_RE = re.compile(
    rf"^\s*(export\s+)?interface\s+({_IDENT}){_GENERICS}(?:\s+extends\s+([^{{]+))?\s*\{{"
)
_TYPE_RE = re.compile(
    rf"^\s*(export\s+)?type\s+({_IDENT}){_GENERICS}\s*=\s*(.+?);?\s*$"
)

# ---------------------------------------------------------------------------
# Member patterns (applied to lines directly inside a class / interface body)
# ---------------------------------------------------------------------------
_CLASS_METHOD_RE = re.compile(
    r"^\s*(?:(private|public|protected)\s+)?(?:override\s+|abstract\s+)*(static\s+)?"
    rf"(?:override\s+)?(async\s+)?({_IDENT})\s*{_GENERICS}\(([^)]*)\)\s*:\s*([^{{;]+)"
)
_CLASS_PROPERTY_RE = re.compile(
    r"^\s*(?:(private|public|protected)\s+)?(?:static\s+)?(readonly\s+)?"
    rf"({_IDENT})(\?)?\s*:\s*([^=;]+?)\s*(?:=\s*[^;]+)?;?\s*$"
)
_INTERFACE_METHOD_RE = re.compile(
    rf"^\s*({_IDENT})\??\s*{_GENERICS}\(([^)]*)\)\s*:\s*([^;]+?);?\s*$"
)
_INTERFACE_PROPERTY_RE = re.compile(
    rf"^\s*(readonly\s+)?({_IDENT})(\?)?\s*:\s*([^;]+?)[;,]?\s*$"
)

_PARAM_RE = re.compile(
    rf"^((?:\.\.\.)?{_IDENT})(\?)?\s*:\s*(.+?)(?:\s*=\s*([^=>].*))?$"
)

_KEYWORDS: Set[str] = {
    "if", "for", "while", "switch", "catch", "return", "function",
    "with", "new", "typeof", "await", "yield", "else", "do",
}


@dataclass
class ExtractedEntities:
    functions: List[FunctionEntity] = field(default_factory=list)
    classes: List[ClassEntity] = field(default_factory=list)
    interfaces: List[InterfaceEntity] = field(default_factory=list)
    types: List[TypeEntity] = field(default_factory=list)


@dataclass
class _Block:
    """A brace-delimited body following a declaration line."""

    start: int  # index of the declaration line
    end: int  # index of the last consumed line (inclusive)
    member_lines: List[int]  # body lines sitting at depth 1


# ===================================================================
# Helpers
# ===================================================================

def brace_delta(line: str) -> int:
    """Net ``{`` minus ``}`` on *line*, ignoring strings and ``//`` comments."""
    delta = 0
    quote: Optional[str] = None
    i = 0
    while i < len(line):
        ch = line[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in "'\"`":
            quote = ch
        elif ch == "/" and line.startswith("//", i):
            break
        elif ch == "{":
            delta += 1
        elif ch == "}":
            delta -= 1
        i += 1
    return delta


def parse_parameters(raw: str) -> List[Parameter]:
    """Split a raw parameter list on commas into :class:`Parameter` entries.

    ``name[?]: Type`` tokens keep their annotation; anything else becomes a
    required ``any`` parameter.
    """
    if not raw.strip():
        return []

    params: List[Parameter] = []
    for token in raw.split(","):
        token = token.strip()
        if not token:
            continue
        match = _PARAM_RE.match(token)
        if match:
            params.append(Parameter(
                name=match.group(1),
                type=match.group(3).strip(),
                is_optional=match.group(2) == "?",
                default_value=match.group(4).strip() if match.group(4) else None,
            ))
        else:
            name, _, default = token.partition("=")
            params.append(Parameter(
                name=name.strip(),
                type="any",
                is_optional=False,
                default_value=default.strip() or None,
            ))
    return params


def extract_description(lines: List[str], index: int) -> str:
    """Collect the doc comment sitting directly above ``lines[index]``.

    Walks upward over ``*``-prefixed lines, skipping blank and ``//`` lines,
    and stops at a tag line (``@param`` ...), at the comment opener or at any
    other code line.
    """
    parts: List[str] = []
    for i in range(index - 1, -1, -1):
        line = lines[i].strip()

        if line.startswith("/*"):
            text = line[3:] if line.startswith("/**") else line[2:]
            if text.endswith("*/"):
                text = text[:-2]
            text = text.strip()
            if text and not text.startswith("@"):
                parts.insert(0, text)
            break

        if line.startswith("*"):
            if line.startswith("*/"):
                continue
            comment = line[1:].strip()
            if comment.endswith("*/"):
                comment = comment[:-2].strip()
            if comment.startswith("@"):
                break
            if comment:
                parts.insert(0, comment)
            continue

        if not line or line.startswith("//"):
            continue
        break

    return " ".join(parts).strip()


def _find_block(lines: List[str], start: int) -> _Block:
    """Scan forward from a declaration line until brace depth returns to zero."""
    depth = brace_delta(lines[start])
    member_lines: List[int] = []
    j = start
    while depth > 0 and j + 1 < len(lines):
        j += 1
        if depth == 1:
            member_lines.append(j)
        depth += brace_delta(lines[j])
    return _Block(start=start, end=j, member_lines=member_lines)


def _split_names(raw: Optional[str]) -> Optional[List[str]]:
    if not raw:
        return None
    names = [part.strip() for part in raw.split(",") if part.strip()]
    return names or None


def _safely(label: str, fn: Callable[[], List[T]]) -> List[T]:
    try:
        return fn()
    except Exception as exc:
        logger.debug("Entity extraction for %s failed: %s", label, exc)
        return []


# ===================================================================
# Extractor
# ===================================================================

class EntityExtractor:
    """Extract functions, classes, interfaces and type aliases from file text."""

    def extract(self, content: str) -> ExtractedEntities:
        lines = content.split("\n")
        class_blocks = _safely("class blocks", lambda: self._blocks(lines, _CLASS_RE))
        interface_blocks = _safely("interface blocks", lambda: self._blocks(lines, _INTERFACE_RE))

        member_lines: Set[int] = set()
        for _, block in class_blocks + interface_blocks:
            member_lines.update(range(block.start + 1, block.end + 1))

        return ExtractedEntities(
            functions=_safely("functions", lambda: self.extract_functions(lines, member_lines)),
            classes=_safely("classes", lambda: [self._build_class(lines, m, b) for m, b in class_blocks]),
            interfaces=_safely(
                "interfaces", lambda: [self._build_interface(lines, m, b) for m, b in interface_blocks],
            ),
            types=_safely("types", lambda: self.extract_types(lines)),
        )

    # ------------------------------------------------------------------
    # Functions
    # ------------------------------------------------------------------

    def extract_functions(
        self,
        lines: List[str],
        member_lines: Optional[Set[int]] = None,
    ) -> List[FunctionEntity]:
        """Detect annotated function declarations, arrow functions and bare methods.

        Bare method-shaped lines inside ``member_lines`` belong to a class or
        interface and are skipped.
        """
        member_lines = member_lines or set()
        functions: List[FunctionEntity] = []

        for i, line in enumerate(lines):
            entity = self._match_function(line, i, lines, i in member_lines)
            if entity is not None:
                functions.append(entity)
        return functions

    def _match_function(
        self,
        line: str,
        index: int,
        lines: List[str],
        in_member_body: bool,
    ) -> Optional[FunctionEntity]:
        match = _FUNCTION_RE.match(line)
        if match:
            exported, is_async, name, params, returns = match.groups()
            return self._function(name, params, returns, bool(exported), bool(is_async), lines, index)

        match = _ARROW_RE.match(line)
        if match:
            exported, name, is_async, params, returns = match.groups()
            return self._function(name, params, returns, bool(exported), bool(is_async), lines, index)

        if in_member_body:
            return None

        match = _BARE_METHOD_RE.match(line)
        if match and match.group(2) not in _KEYWORDS:
            is_async, name, params, returns = match.groups()
            return self._function(name, params, returns, False, bool(is_async), lines, index)
        return None

    @staticmethod
    def _function(
        name: str,
        params: str,
        returns: str,
        exported: bool,
        is_async: bool,
        lines: List[str],
        index: int,
    ) -> FunctionEntity:
        return FunctionEntity(
            name=name,
            parameters=parse_parameters(params or ""),
            return_type=returns.strip() or "void",
            description=extract_description(lines, index),
            declaration_line=index + 1,
            is_async=is_async,
            is_exported=exported,
        )

    # ------------------------------------------------------------------
    # Classes and interfaces
    # ------------------------------------------------------------------

    @staticmethod
    def _blocks(lines: List[str], pattern: re.Pattern) -> List[Tuple[re.Match, _Block]]:
        found = []
        for i, line in enumerate(lines):
            match = pattern.match(line)
            if match:
                found.append((match, _find_block(lines, i)))
        return found

    def extract_classes(self, lines: List[str]) -> List[ClassEntity]:
        return [self._build_class(lines, m, b) for m, b in self._blocks(lines, _CLASS_RE)]

    def extract_interfaces(self, lines: List[str]) -> List[InterfaceEntity]:
        return [self._build_interface(lines, m, b) for m, b in self._blocks(lines, _INTERFACE_RE)]

    def _build_class(self, lines: List[str], match: re.Match, block: _Block) -> ClassEntity:
        exported, name, extends, implements = match.groups()
        return ClassEntity(
            name=name,
            methods=_safely(name, lambda: self._class_methods(lines, block)),
            properties=_safely(name, lambda: self._class_properties(lines, block)),
            description=extract_description(lines, block.start),
            declaration_line=block.start + 1,
            is_exported=bool(exported),
            extends=extends,
            implements=_split_names(implements),
        )

    def _build_interface(self, lines: List[str], match: re.Match, block: _Block) -> InterfaceEntity:
        exported, name, extends = match.groups()
        return InterfaceEntity(
            name=name,
            properties=_safely(name, lambda: self._interface_properties(lines, block)),
            methods=_safely(name, lambda: self._interface_methods(lines, block)),
            description=extract_description(lines, block.start),
            declaration_line=block.start + 1,
            is_exported=bool(exported),
            extends=_split_names(extends),
        )

    def _class_methods(self, lines: List[str], block: _Block) -> List[MethodEntity]:
        methods: List[MethodEntity] = []
        for i in block.member_lines:
            match = _CLASS_METHOD_RE.match(lines[i])
            if not match or match.group(4) in _KEYWORDS:
                continue
            visibility, is_static, is_async, name, params, returns = match.groups()
            methods.append(MethodEntity(
                name=name,
                parameters=parse_parameters(params or ""),
                return_type=returns.strip() or "void",
                description=extract_description(lines, i),
                declaration_line=i + 1,
                is_async=bool(is_async),
                is_private=visibility == "private",
                is_static=bool(is_static),
            ))
        return methods

    def _class_properties(self, lines: List[str], block: _Block) -> List[Property]:
        properties: List[Property] = []
        for i in block.member_lines:
            match = _CLASS_PROPERTY_RE.match(lines[i])
            if not match:
                continue
            _, readonly, name, optional, prop_type = match.groups()
            properties.append(Property(
                name=name,
                type=prop_type.strip() or "any",
                description=extract_description(lines, i),
                declaration_line=i + 1,
                is_optional=optional == "?",
                is_readonly=bool(readonly),
            ))
        return properties

    def _interface_methods(self, lines: List[str], block: _Block) -> List[MethodEntity]:
        methods: List[MethodEntity] = []
        for i in block.member_lines:
            match = _INTERFACE_METHOD_RE.match(lines[i])
            if not match:
                continue
            name, params, returns = match.groups()
            methods.append(MethodEntity(
                name=name,
                parameters=parse_parameters(params or ""),
                return_type=returns.strip() or "void",
                description=extract_description(lines, i),
                declaration_line=i + 1,
            ))
        return methods

    def _interface_properties(self, lines: List[str], block: _Block) -> List[Property]:
        properties: List[Property] = []
        for i in block.member_lines:
            match = _INTERFACE_PROPERTY_RE.match(lines[i])
            if not match:
                continue
            readonly, name, optional, prop_type = match.groups()
            properties.append(Property(
                name=name,
                type=prop_type.strip() or "any",
                description=extract_description(lines, i),
                declaration_line=i + 1,
                is_optional=optional == "?",
                is_readonly=bool(readonly),
            ))
        return properties

    # ------------------------------------------------------------------
    # Type aliases
    # ------------------------------------------------------------------

    def extract_types(self, lines: List[str]) -> List[TypeEntity]:
        types: List[TypeEntity] = []
        for i, line in enumerate(lines):
            match = _TYPE_RE.match(line)
            if not match:
                continue
            exported, name, definition = match.groups()
            types.append(TypeEntity(
                name=name,
                definition=definition.strip(),
                description=extract_description(lines, i),
                declaration_line=i + 1,
                is_exported=bool(exported),
            ))
        return types


def extract_entities(content: str) -> ExtractedEntities:
    """Module-level shortcut for :meth:`EntityExtractor.extract`."""
    return EntityExtractor().extract(content)
