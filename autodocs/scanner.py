"""Project scanner: walk a source tree and build the file inventory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from .config import EXCLUDED_DIRS, EXCLUDED_MARKERS, SUPPORTED_EXTENSIONS
from .models import SourceFile
from .parser import EntityExtractor

logger = logging.getLogger(__name__)

LANGUAGE_MAP: Dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
}


def language_for(path: Path) -> str:
    return LANGUAGE_MAP.get(path.suffix.lower(), "unknown")


def is_excluded(relative: Path) -> bool:
    """True for dependency/build or hidden directories and test or spec files."""
    if any(part in EXCLUDED_DIRS or part.startswith(".") for part in relative.parts[:-1]):
        return True
    return any(marker in relative.name for marker in EXCLUDED_MARKERS)


class ProjectScanner:
    """Find supported source files under a root and extract their entities."""

    def __init__(self, extractor: Optional[EntityExtractor] = None) -> None:
        self.extractor = extractor or EntityExtractor()

    def find_source_files(self, project_root: Path) -> List[Path]:
        root = Path(project_root)
        if not root.is_dir():
            logger.warning("Project path %s is not a readable directory", root)
            return []

        found: List[Path] = []
        for path in root.rglob("*"):
            if path.suffix.lower() not in SUPPORTED_EXTENSIONS or not path.is_file():
                continue
            if is_excluded(path.relative_to(root)):
                continue
            found.append(path)
        return sorted(found, key=lambda p: p.relative_to(root).as_posix())

    def analyze_file(self, project_root: Path, file_path: Path) -> SourceFile:
        content = file_path.read_text(encoding="utf-8")
        entities = self.extractor.extract(content)
        return SourceFile(
            path=file_path.relative_to(project_root).as_posix(),
            content=content,
            language=language_for(file_path),
            functions=entities.functions,
            classes=entities.classes,
            interfaces=entities.interfaces,
            types=entities.types,
        )

    def analyze_project(self, project_root: Path) -> List[SourceFile]:
        """Return a :class:`SourceFile` for every supported file under *project_root*.

        Files that cannot be read or analysed are logged and skipped; a
        missing root yields an empty list.
        """
        root = Path(project_root)
        analyzed: List[SourceFile] = []
        for file_path in self.find_source_files(root):
            try:
                analyzed.append(self.analyze_file(root, file_path))
            except Exception as exc:
                logger.warning("Failed to analyze file %s: %s", file_path, exc)
        logger.info("Analyzed %d source files under %s", len(analyzed), root)
        return analyzed


def analyze_project(project_root: Path) -> List[SourceFile]:
    return ProjectScanner().analyze_project(project_root)
