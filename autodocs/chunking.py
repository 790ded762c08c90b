"""Flatten a scanned project into ordered, independent text chunks.

Only the exported surface of each file is indexed. Chunk order is fixed
(file order, then the file summary, functions, classes, interfaces, types),
so identical input always produces identical chunk text.
"""

from __future__ import annotations

from typing import Iterable, List

from .models import Chunk, SourceFile


def file_summary(source: SourceFile) -> str:
    """Pipe-joined digest of the exported names of each entity kind."""
    summary: List[str] = []
    if source.functions:
        summary.append("Functions: " + ", ".join(f.name for f in source.functions if f.is_exported))
    if source.classes:
        summary.append("Classes: " + ", ".join(c.name for c in source.classes if c.is_exported))
    if source.interfaces:
        summary.append("Interfaces: " + ", ".join(i.name for i in source.interfaces if i.is_exported))
    if source.types:
        summary.append("Types: " + ", ".join(t.name for t in source.types if t.is_exported))
    return " | ".join(summary)


def chunks_for_file(source: SourceFile) -> List[Chunk]:
    path = source.path
    chunks = [
        Chunk(
            text=f"File: {path}\nLanguage: {source.language}\nContent: {file_summary(source)}",
            file=path,
            declaration_line=0,
        )
    ]

    for func in source.functions:
        if not func.is_exported:
            continue
        params = ", ".join(f"{p.name}: {p.type}" for p in func.parameters)
        chunks.append(Chunk(
            text=(
                f"Function: {func.name}\nParameters: {params}\nReturns: {func.return_type}\n"
                f"Description: {func.description}\nFile: {path}"
            ),
            file=path,
            declaration_line=func.declaration_line,
        ))

    for cls in source.classes:
        if not cls.is_exported:
            continue
        chunks.append(Chunk(
            text=(
                f"Class: {cls.name}\nDescription: {cls.description}\nMethods: {len(cls.methods)}\n"
                f"Properties: {len(cls.properties)}\nFile: {path}"
            ),
            file=path,
            declaration_line=cls.declaration_line,
        ))

    for iface in source.interfaces:
        if not iface.is_exported:
            continue
        chunks.append(Chunk(
            text=(
                f"Interface: {iface.name}\nDescription: {iface.description}\n"
                f"Properties: {len(iface.properties)}\nMethods: {len(iface.methods)}\nFile: {path}"
            ),
            file=path,
            declaration_line=iface.declaration_line,
        ))

    for alias in source.types:
        if not alias.is_exported:
            continue
        chunks.append(Chunk(
            text=(
                f"Type: {alias.name}\nDefinition: {alias.definition}\n"
                f"Description: {alias.description}\nFile: {path}"
            ),
            file=path,
            declaration_line=alias.declaration_line,
        ))

    return chunks


def build_chunks(files: Iterable[SourceFile]) -> List[Chunk]:
    chunks: List[Chunk] = []
    for source in files:
        chunks.extend(chunks_for_file(source))
    return chunks
