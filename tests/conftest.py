"""Pytest configuration and fixtures for autodocs tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Sequence

import pytest

from autodocs.embeddings import HashEmbeddingModel


@pytest.fixture(autouse=True)
def _isolate_user_config(tmp_path_factory, monkeypatch):
    """Point user-level config at an empty temp dir and drop real credentials."""
    home = tmp_path_factory.mktemp("autodocs_home")
    monkeypatch.setattr("autodocs.config.BASE_DIR", home)
    monkeypatch.setattr("autodocs.config.CONFIG_FILE", home / "config.toml")
    monkeypatch.setattr("autodocs.config.LLM_API_KEY", "")
    monkeypatch.setattr("autodocs.config.LLM_PROVIDER", "openai")
    monkeypatch.setattr("autodocs.config.EMBEDDING_PROVIDER", "openai")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


@pytest.fixture(autouse=True)
def _mock_local_llm(monkeypatch):
    """Replace LocalLLM everywhere so no test reaches a completion provider."""

    class _MockLocalLLM:
        def __init__(self, **kwargs):
            self.provider_name = kwargs.get("provider", "mock")
            self.model = kwargs.get("model", "mock-model")
            self.api_key = kwargs.get("api_key")
            self.prompts: List[str] = []

        def complete(self, prompt: str, max_tokens: int = 4000, temperature: float = 0.7) -> str:
            self.prompts.append(prompt)
            return f"# Generated\n\n{prompt.splitlines()[0]}"

    monkeypatch.setattr("autodocs.llm.LocalLLM", _MockLocalLLM)
    monkeypatch.setattr("autodocs.docs_generator.LocalLLM", _MockLocalLLM)
    monkeypatch.setattr("autodocs.cli.LocalLLM", _MockLocalLLM)


class FixedEmbedder:
    """Returns preset vectors per text; unknown texts get ``default``."""

    def __init__(self, vectors: Dict[str, List[float]], default: List[float] = None):
        self.vectors = vectors
        self.default = default or [0.0, 0.0]
        self.calls: List[List[str]] = []

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        return [list(self.vectors.get(text, self.default)) for text in texts]


class FlakyEmbedder:
    """Hash embedder that raises on the listed (1-based) call numbers."""

    def __init__(self, failing_calls):
        self.failing_calls = set(failing_calls)
        self.inner = HashEmbeddingModel(dim=16)
        self.call_count = 0

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        self.call_count += 1
        if self.call_count in self.failing_calls:
            raise ConnectionError("provider unavailable")
        return self.inner.embed(texts)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path(temp_dir: Path) -> Path:
    """Copy of the sample TypeScript project in a writable location."""
    src = Path(__file__).parent / "fixtures" / "ts_project"
    dest = temp_dir / "ts_project"
    shutil.copytree(src, dest)
    return dest


@pytest.fixture
def hash_embedder() -> HashEmbeddingModel:
    return HashEmbeddingModel(dim=64)


@pytest.fixture
def fixed_embedder_cls():
    return FixedEmbedder


@pytest.fixture
def flaky_embedder_cls():
    return FlakyEmbedder


@pytest.fixture
def sample_ts_code() -> str:
    """Sample TypeScript source for extractor tests."""
    return '''
        /**
         * A test function
         */
        export function testFunction(param1: string, param2?: number): string {
          return param1 + param2;
        }

        export class TestClass {
          private property: string = "test";

          public method(): void {
            console.log("test");
          }
        }

        export interface TestInterface {
          name: string;
          value: number;
        }

        export type TestType = string | number;
      '''
