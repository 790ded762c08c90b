"""Documentation generator: README, API reference and examples via an LLM.

The prompts are assembled from the scanned :class:`SourceFile` inventory and
sent to a :class:`~autodocs.llm.Completer`. README and API docs are
independent completions and run concurrently on a two-worker pool.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from .llm import Completer, LocalLLM
from .models import DocumentationOptions, ProjectConfig, SourceFile
from .scanner import ProjectScanner

logger = logging.getLogger(__name__)

_MAX_KEY_FUNCTIONS = 5
_MAX_EXAMPLE_FUNCTIONS = 5


@dataclass
class GeneratedDocs:
    readme: str
    api_docs: str
    examples: Optional[str] = None

    def files(self) -> Dict[str, str]:
        out = {"README.md": self.readme, "API.md": self.api_docs}
        if self.examples is not None:
            out["EXAMPLES.md"] = self.examples
        return out


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def create_project_summary(files: List[SourceFile]) -> str:
    """Statistics, file structure and key exported components."""
    lines = [
        "Project Statistics:",
        f"- Total Files: {len(files)}",
        f"- Total Functions: {sum(len(f.functions) for f in files)}",
        f"- Total Classes: {sum(len(f.classes) for f in files)}",
        f"- Total Interfaces: {sum(len(f.interfaces) for f in files)}",
        f"- Total Types: {sum(len(f.types) for f in files)}",
        "",
        "File Structure:",
    ]
    for source in files:
        lines.extend([
            f"- {source.path}",
            f"  - Functions: {len(source.functions)}",
            f"  - Classes: {len(source.classes)}",
            f"  - Interfaces: {len(source.interfaces)}",
            f"  - Types: {len(source.types)}",
        ])

    lines.extend(["", "Key Components:"])
    for source in files:
        exported_functions = [f for f in source.functions if f.is_exported][:_MAX_KEY_FUNCTIONS]
        if exported_functions:
            lines.append(f"{source.path} - Functions:")
            for func in exported_functions:
                params = ", ".join(p.name for p in func.parameters)
                lines.append(f"  - {func.name}({params})")
        exported_classes = [c for c in source.classes if c.is_exported]
        if exported_classes:
            lines.append(f"{source.path} - Classes:")
            for cls in exported_classes:
                suffix = f" extends {cls.extends}" if cls.extends else ""
                lines.append(f"  - {cls.name}{suffix}")

    return "\n".join(lines)


def create_api_summary(files: List[SourceFile], options: Optional[DocumentationOptions] = None) -> str:
    """Markdown outline of every documented entity, grouped by file."""
    options = options or DocumentationOptions()
    include_all = options.include_private_members
    sections: List[str] = []

    for source in files:
        functions = [f for f in source.functions if include_all or f.is_exported]
        classes = [c for c in source.classes if include_all or c.is_exported]
        interfaces = [i for i in source.interfaces if include_all or i.is_exported]
        types = [t for t in source.types if include_all or t.is_exported]
        if not options.include_type_definitions:
            interfaces, types = [], []
        if not (functions or classes or interfaces or types):
            continue

        out = [f"## {source.path}"]

        if functions:
            out.append(f"### Functions ({len(functions)})")
            for func in functions:
                params = ", ".join(
                    f"{p.name}: {p.type}{'?' if p.is_optional else ''}" for p in func.parameters
                )
                out.append(f"#### {func.name}")
                out.append(f"- **Parameters**: {params}")
                out.append(f"- **Returns**: {func.return_type}")
                out.append(f"- **Async**: {_yes_no(func.is_async)}")
                out.append(f"- **Exported**: {_yes_no(func.is_exported)}")
                if func.description:
                    out.append(f"- **Description**: {func.description}")

        if classes:
            out.append(f"### Classes ({len(classes)})")
            for cls in classes:
                out.append(f"#### {cls.name}")
                if cls.extends:
                    out.append(f"- **Extends**: {cls.extends}")
                if cls.implements:
                    out.append(f"- **Implements**: {', '.join(cls.implements)}")
                methods = [m for m in cls.methods if include_all or not m.is_private]
                out.append(f"- **Methods**: {', '.join(m.name for m in methods) or 'none'}")
                out.append(f"- **Properties**: {len(cls.properties)}")
                out.append(f"- **Exported**: {_yes_no(cls.is_exported)}")
                if cls.description:
                    out.append(f"- **Description**: {cls.description}")

        if interfaces:
            out.append(f"### Interfaces ({len(interfaces)})")
            for iface in interfaces:
                out.append(f"#### {iface.name}")
                if iface.extends:
                    out.append(f"- **Extends**: {', '.join(iface.extends)}")
                out.append(f"- **Properties**: {len(iface.properties)}")
                out.append(f"- **Methods**: {len(iface.methods)}")
                out.append(f"- **Exported**: {_yes_no(iface.is_exported)}")
                if iface.description:
                    out.append(f"- **Description**: {iface.description}")

        if types:
            out.append(f"### Types ({len(types)})")
            for alias in types:
                out.append(f"#### {alias.name}")
                out.append(f"- **Definition**: `{alias.definition}`")
                out.append(f"- **Exported**: {_yes_no(alias.is_exported)}")
                if alias.description:
                    out.append(f"- **Description**: {alias.description}")

        sections.append("\n".join(out))

    return "\n\n".join(sections)


def _project_header(config: ProjectConfig) -> str:
    lines = [
        f"- Name: {config.name}",
        f"- Description: {config.description}",
        f"- Version: {config.version}",
        f"- Author: {config.author}",
        f"- License: {config.license}",
    ]
    if config.repository:
        lines.append(f"- Repository: {config.repository}")
    if config.homepage:
        lines.append(f"- Homepage: {config.homepage}")
    return "\n".join(lines)


def _option_lines(options: DocumentationOptions) -> str:
    return (
        f"Style: {options.style}\n"
        f"Output Format: {options.output_format}\n"
        f"Include Examples: {options.include_examples}\n"
        f"Include Type Definitions: {options.include_type_definitions}\n"
        f"Include Private Members: {options.include_private_members}"
    )


class DocumentationGenerator:
    """Turn a scanned project into README / API / examples text."""

    def __init__(self, completer: Optional[Completer] = None, scanner: Optional[ProjectScanner] = None):
        self.completer = completer or LocalLLM()
        self.scanner = scanner or ProjectScanner()

    def generate_documentation(
        self,
        project_path: Path,
        config: ProjectConfig,
        options: Optional[DocumentationOptions] = None,
        files: Optional[List[SourceFile]] = None,
    ) -> GeneratedDocs:
        options = options or DocumentationOptions()
        if files is None:
            logger.info("Analyzing project structure...")
            files = self.scanner.analyze_project(project_path)

        logger.info("Generating README and API docs for %d files", len(files))
        with ThreadPoolExecutor(max_workers=2) as pool:
            readme_future = pool.submit(self.generate_readme, files, config, options)
            api_future = pool.submit(self.generate_api_docs, files, config, options)
            readme = readme_future.result()
            api_docs = api_future.result()

        examples = self.generate_code_examples(files, config) if options.include_examples else None
        return GeneratedDocs(readme=readme, api_docs=api_docs, examples=examples)

    def generate_readme(
        self,
        files: List[SourceFile],
        config: ProjectConfig,
        options: DocumentationOptions,
    ) -> str:
        prompt = (
            f"Create a README.md for the {config.name} project.\n\n"
            f"Project Details:\n{_project_header(config)}\n\n"
            f"Project Structure Analysis:\n{create_project_summary(files)}\n\n"
            "Include a header with the project name and description, installation "
            "instructions, usage examples with code snippets, an API overview, "
            "contributing guidelines and license information.\n\n"
            f"{_option_lines(options)}"
        )
        return self.completer.complete(prompt, max_tokens=4000, temperature=0.7)

    def generate_api_docs(
        self,
        files: List[SourceFile],
        config: ProjectConfig,
        options: DocumentationOptions,
    ) -> str:
        prompt = (
            f"Create API documentation for {config.name}.\n\n"
            f"Project: {config.name} v{config.version}\n"
            f"Description: {config.description}\n\n"
            f"API Structure:\n{create_api_summary(files, options)}\n\n"
            "Organize by module, document parameters and return types, add a "
            "table of contents and short usage examples for major functions.\n\n"
            f"{_option_lines(options)}"
        )
        return self.completer.complete(prompt, max_tokens=6000, temperature=0.5)

    def generate_code_examples(self, files: List[SourceFile], config: ProjectConfig) -> str:
        candidates = [
            func
            for source in files
            for func in source.functions
            if func.is_exported and func.description
        ][:_MAX_EXAMPLE_FUNCTIONS]

        key_functions = "\n".join(f"- {func.name}: {func.description}" for func in candidates)
        prompt = (
            f"Generate practical code examples for the {config.name} project.\n\n"
            f"Project: {config.name}\n"
            f"Description: {config.description}\n\n"
            f"Key Functions to demonstrate:\n{key_functions or '- (no documented exports)'}\n\n"
            "Show imports and setup, error handling and comments for each step. "
            "Generate 3-5 copy-pasteable TypeScript examples."
        )
        return self.completer.complete(prompt, max_tokens=3000, temperature=0.7)

    @staticmethod
    def write(docs: GeneratedDocs, output_dir: Path) -> List[Path]:
        output_dir.mkdir(parents=True, exist_ok=True)
        written: List[Path] = []
        for name, text in docs.files().items():
            path = output_dir / name
            path.write_text(text, encoding="utf-8")
            written.append(path)
        return written
