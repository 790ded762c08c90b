"""Core data models used by extraction, chunking, indexing and docs generation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Parameter:
    name: str
    type: str = "any"
    description: str = ""
    is_optional: bool = False
    default_value: Optional[str] = None


@dataclass
class Property:
    name: str
    type: str = "any"
    description: str = ""
    declaration_line: int = 1
    is_optional: bool = False
    is_readonly: bool = False


@dataclass
class FunctionEntity:
    name: str
    parameters: List[Parameter]
    return_type: str
    description: str
    declaration_line: int
    is_async: bool = False
    is_exported: bool = False


@dataclass
class MethodEntity:
    name: str
    parameters: List[Parameter]
    return_type: str
    description: str
    declaration_line: int
    is_async: bool = False
    is_private: bool = False
    is_static: bool = False


@dataclass
class ClassEntity:
    name: str
    methods: List[MethodEntity]
    properties: List[Property]
    description: str
    declaration_line: int
    is_exported: bool = False
    extends: Optional[str] = None
    implements: Optional[List[str]] = None


@dataclass
class InterfaceEntity:
    name: str
    properties: List[Property]
    methods: List[MethodEntity]
    description: str
    declaration_line: int
    is_exported: bool = False
    extends: Optional[List[str]] = None


@dataclass
class TypeEntity:
    name: str
    definition: str
    description: str
    declaration_line: int
    is_exported: bool = False


@dataclass
class SourceFile:
    """One scanned file and the entities declared in it."""

    path: str
    content: str
    language: str
    functions: List[FunctionEntity] = field(default_factory=list)
    classes: List[ClassEntity] = field(default_factory=list)
    interfaces: List[InterfaceEntity] = field(default_factory=list)
    types: List[TypeEntity] = field(default_factory=list)


@dataclass(frozen=True)
class Chunk:
    """Independent unit of indexed text; ``declaration_line`` 0 means whole file."""

    text: str
    file: str
    declaration_line: int = 0


@dataclass(frozen=True)
class EmbeddingRecord:
    text: str
    embedding: List[float]
    file: str
    declaration_line: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "embedding": list(self.embedding),
            "file": self.file,
            "lineNumber": self.declaration_line,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmbeddingRecord":
        """Rebuild a record from its JSON form.

        Raises ``KeyError``/``TypeError``/``ValueError`` on malformed input so
        the caller can decide how to treat a corrupt index file.
        """
        return cls(
            text=str(data["text"]),
            embedding=[float(v) for v in data["embedding"]],
            file=str(data["file"]),
            declaration_line=int(data.get("lineNumber", 0)),
        )


@dataclass
class SearchResult:
    text: str
    file: str
    declaration_line: int
    similarity: float
    context: str


@dataclass
class ProjectConfig:
    """Project metadata fed into documentation prompts."""

    name: str = "My Project"
    description: str = "A wonderful project"
    version: str = "1.0.0"
    author: str = "Unknown"
    license: str = "MIT"
    repository: Optional[str] = None
    homepage: Optional[str] = None
    bugs: Optional[str] = None
    keywords: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectConfig":
        known = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
        return cls(**known)


@dataclass
class DocumentationOptions:
    include_examples: bool = True
    include_type_definitions: bool = True
    include_private_members: bool = False
    output_format: str = "markdown"
    style: str = "apple"
