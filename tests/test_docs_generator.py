"""Tests for the documentation generator prompts and output."""

from pathlib import Path

from autodocs.config_manager import load_project_config
from autodocs.docs_generator import (
    DocumentationGenerator,
    create_api_summary,
    create_project_summary,
)
from autodocs.models import DocumentationOptions
from autodocs.scanner import analyze_project


class RecordingCompleter:
    def __init__(self):
        self.prompts = []

    def complete(self, prompt: str, max_tokens: int = 4000, temperature: float = 0.7) -> str:
        self.prompts.append(prompt)
        return "generated: " + prompt.splitlines()[0]


class TestSummaries:

    def test_project_summary_counts(self, sample_project_path: Path):
        summary = create_project_summary(analyze_project(sample_project_path))

        assert "- Total Files: 3" in summary
        assert "- Total Functions: 4" in summary
        assert "- Total Classes: 2" in summary
        assert "  - addTax(amount, rate)" in summary
        assert "  - InvoiceStore extends BaseStore" in summary
        assert "internalHelper" not in summary

    def test_api_summary_hides_private_by_default(self, sample_project_path: Path):
        files = analyze_project(sample_project_path)

        public = create_api_summary(files)
        everything = create_api_summary(files, DocumentationOptions(include_private_members=True))

        assert "#### addTax" in public
        assert "- **Parameters**: amount: number, rate: number?" in public
        assert "internalHelper" not in public
        assert "HiddenCache" not in public
        assert "flush" not in public
        assert "internalHelper" in everything
        assert "flush" in everything

    def test_api_summary_without_types(self, sample_project_path: Path):
        options = DocumentationOptions(include_type_definitions=False)
        summary = create_api_summary(analyze_project(sample_project_path), options)

        assert "Customer" not in summary
        assert "InvoiceStatus" not in summary
        assert "#### InvoiceStore" in summary


class TestGenerator:

    def test_generates_all_documents(self, sample_project_path: Path, temp_dir: Path):
        completer = RecordingCompleter()
        generator = DocumentationGenerator(completer)
        project = load_project_config(sample_project_path)

        docs = generator.generate_documentation(sample_project_path, project)

        assert len(completer.prompts) == 3
        assert docs.readme == "generated: Create a README.md for the invoice-kit project."
        assert docs.api_docs.startswith("generated: Create API documentation")
        assert docs.examples is not None
        assert "- roundMoney: Round a value to two decimals." in completer.prompts[2]

        written = generator.write(docs, temp_dir / "out")
        assert sorted(p.name for p in written) == ["API.md", "EXAMPLES.md", "README.md"]

    def test_examples_can_be_skipped(self, sample_project_path: Path):
        completer = RecordingCompleter()
        project = load_project_config(sample_project_path)
        options = DocumentationOptions(include_examples=False)

        docs = DocumentationGenerator(completer).generate_documentation(sample_project_path, project, options)

        assert docs.examples is None
        assert set(docs.files()) == {"README.md", "API.md"}
        assert len(completer.prompts) == 2

    def test_default_completer_is_local_llm(self):
        generator = DocumentationGenerator()
        assert generator.completer.complete("Hello\nworld").startswith("# Generated")
