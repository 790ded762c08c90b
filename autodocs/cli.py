"""Typer-based CLI for autodocs: documentation generation and semantic search."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from . import __version__, config
from .config_manager import ConfigError, init_project_config, load_project_config
from .docs_generator import DocumentationGenerator
from .embeddings import EmbeddingError, describe_embedder, get_embedder
from .llm import LocalLLM
from .models import DocumentationOptions, SearchResult
from .scanner import ProjectScanner
from .vector_store import EmbeddingIndex

console = Console()

app = typer.Typer(
    help="📚 autodocs: AI-powered documentation generator with semantic search.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"autodocs v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show progress logging."),
):
    """autodocs: document a TypeScript/JavaScript project and search it semantically."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(message: str) -> None:
    console.print(f"[red]❌ Error:[/red] {message}", highlight=False)
    raise typer.Exit(code=1)


def _require_api_key(api_key: Optional[str], needed: bool) -> str:
    key = config.resolve_api_key(api_key)
    if needed and not key:
        _fail(
            "OpenAI API key is required. Set OPENAI_API_KEY environment variable "
            "or use --api-key option."
        )
    return key


def _require_llm_api_key(api_key: Optional[str], needed: bool) -> str:
    key = config.resolve_llm_api_key(api_key)
    if needed and not key:
        _fail(
            f"API key for completion provider '{config.LLM_PROVIDER}' is required. "
            "Set api_key in the llm section of config.toml or use --api-key option."
        )
    return key


def _open_index(project_path: Path, embedding_provider: Optional[str], api_key: str) -> EmbeddingIndex:
    embedder = get_embedder(provider=embedding_provider, api_key=api_key)
    return EmbeddingIndex.for_project(embedder, project_path)


def _print_results(results: List[SearchResult], show_text: bool = True) -> None:
    for rank, result in enumerate(results, start=1):
        console.print(f"[blue]{rank}. {result.file}:{result.declaration_line}[/blue]", highlight=False)
        console.print(f"   [dim]Similarity: {result.similarity * 100:.1f}%[/dim]", highlight=False)
        console.print(f"   {result.context}", highlight=False, markup=False)
        if show_text:
            preview = result.text[:200].replace("\n", " ")
            console.print(f"   [dim]{preview}...[/dim]", highlight=False)
        console.print()


@app.command("generate")
def generate(
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project path."),
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help="OpenAI API key."),
    config_file: str = typer.Option(config.PROJECT_CONFIG_FILE, "--config", "-c", help="Configuration file."),
    output: str = typer.Option(config.DEFAULT_OUTPUT_DIR, "--output", "-o", help="Output directory."),
    examples: bool = typer.Option(True, "--examples/--no-examples", help="Generate EXAMPLES.md."),
    types: bool = typer.Option(True, "--types/--no-types", help="Include type definitions."),
    include_private: bool = typer.Option(False, "--include-private", help="Include private members."),
    style: str = typer.Option("apple", "--style", help="Documentation style: apple, minimal, detailed."),
    fmt: str = typer.Option("markdown", "--format", help="Output format: markdown or html."),
    skip_docs: bool = typer.Option(False, "--skip-docs", help="Only build the search index."),
    embedding_provider: Optional[str] = typer.Option(
        None, "--embedding-provider", help="Embedding provider: openai or hash.",
    ),
):
    """Generate documentation files and the semantic search index."""
    project_path = path.resolve()
    if not project_path.is_dir():
        _fail(f"Project path '{project_path}' does not exist.")

    provider = (embedding_provider or config.EMBEDDING_PROVIDER).lower()
    key = _require_api_key(api_key, provider == "openai")
    llm_key = _require_llm_api_key(api_key, not skip_docs and config.LLM_PROVIDER != "ollama")

    scanner = ProjectScanner()
    files = scanner.analyze_project(project_path)
    console.print(f"🔍 Analyzed {len(files)} source files", highlight=False)

    if not skip_docs:
        try:
            project_config = load_project_config(project_path, config_file)
        except ConfigError as exc:
            _fail(str(exc))

        options = DocumentationOptions(
            include_examples=examples,
            include_type_definitions=types,
            include_private_members=include_private,
            output_format=fmt,
            style=style,
        )
        generator = DocumentationGenerator(LocalLLM(api_key=llm_key or None), scanner)
        docs = generator.generate_documentation(project_path, project_config, options, files=files)
        output_dir = (project_path / output).resolve()
        written = generator.write(docs, output_dir)

        console.print(f"[green]📚 Documentation generated in {output_dir}[/green]", highlight=False)
        for doc_path in written:
            console.print(f"[blue]  📄 {doc_path.name}[/blue]", highlight=False)

    index = _open_index(project_path, provider, key)
    stored = index.generate_embeddings(files)
    console.print(f"[green]🧠 Generated {stored} embeddings for semantic search[/green]", highlight=False)
    console.print('[yellow]🔍 Search with:[/yellow] autodocs search "your search term"', highlight=False)


@app.command("search")
def search(
    query: Optional[str] = typer.Argument(None, help="Free-text query. Omit for interactive mode."),
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project path."),
    api_key: Optional[str] = typer.Option(None, "--api-key", "-k", help="OpenAI API key."),
    limit: int = typer.Option(config.DEFAULT_SEARCH_LIMIT, "--limit", "-l", min=1, help="Number of results."),
    embedding_provider: Optional[str] = typer.Option(
        None, "--embedding-provider", help="Embedding provider: openai or hash.",
    ),
):
    """Search the codebase using the semantic index."""
    provider = (embedding_provider or config.EMBEDDING_PROVIDER).lower()
    key = _require_api_key(api_key, provider == "openai")
    index = _open_index(path.resolve(), provider, key)

    def run(text: str) -> None:
        try:
            results = index.query(text, limit)
        except EmbeddingError as exc:
            _fail(str(exc))
        if not results:
            console.print("[yellow]No results found[/yellow]")
            return
        console.print(f'[green]🔍 Found {len(results)} results for "{text}":[/green]\n', highlight=False)
        _print_results(results, show_text=query is not None)

    if query is not None:
        run(query)
        return

    while True:
        text = typer.prompt("Enter search query (or 'exit' to quit)")
        if text.strip().lower() == "exit":
            break
        run(text)


@app.command("init")
def init(
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project path."),
):
    """Initialize documentation configuration from package.json."""
    project_path = path.resolve()
    try:
        created = init_project_config(project_path, config.PROJECT_CONFIG_FILE)
    except ConfigError as exc:
        _fail(str(exc))

    if created is None:
        console.print("[yellow]Configuration file already exists[/yellow]")
        return

    console.print(f"[green]📝 Configuration created at {created}[/green]", highlight=False)
    console.print(f"Edit {config.PROJECT_CONFIG_FILE} to customize your documentation.", highlight=False)
    console.print("Next steps:")
    console.print("  1. Set your OpenAI API key: export OPENAI_API_KEY=your_key")
    console.print("  2. Generate documentation: autodocs generate")


@app.command("clear")
def clear(
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project path."),
):
    """Delete the persisted search index."""
    index = EmbeddingIndex.for_project(get_embedder(provider="hash"), path.resolve())
    existed = index.index_path.exists()
    index.clear()
    console.print("Cleared search index." if existed else "No search index to clear.")


@app.command("stats")
def stats(
    path: Path = typer.Option(Path("."), "--path", "-p", help="Project path."),
):
    """Show the number of indexed chunks and the configured embedder."""
    embedder = get_embedder()
    index = EmbeddingIndex.for_project(embedder, path.resolve())
    index.load()
    info = describe_embedder(embedder)
    console.print(f"Index file: {index.index_path}", highlight=False)
    console.print(f"Embeddings: {index.count()}", highlight=False)
    console.print(f"Embedding provider: {info['provider']} ({info['model']})", highlight=False)


if __name__ == "__main__":
    app()
