"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .adapters.fs_storage import FsDocumentStore, FsStoryboardStore
from .adapters.idgen import HexId
from .adapters.yaml_codec import YamlStoryboardCodec
from .config import StoryanchorConfig, load_config
from .core.model import Shot
from .core.validation import RepairReport, repair_with_report


@dataclass
class Runtime:
    """Container for all wired components."""
    documents: FsDocumentStore
    storyboard: FsStoryboardStore
    idgen: HexId
    config: StoryanchorConfig

    def load_documents(self) -> dict[str, Any]:
        return self.documents.load_all()

    def load_shots(self) -> list[Shot]:
        return self.storyboard.load()

    def repair(self, save: bool = True) -> RepairReport:
        """Repair every shot against the documents on disk, saving when anything changed."""
        report = repair_with_report(
            self.load_shots(), self.load_documents(), self.config.anchoring
        )
        if save and report.changed:
            self.storyboard.save(report.shots)
        return report


def build_runtime(
    project_path: Path | None = None,
    config_path: Path | None = None,
) -> Runtime:
    """Build and wire all components for a project directory."""
    config = load_config(config_path=config_path, project_path=project_path)

    documents = FsDocumentStore(config.project.documents)
    storyboard = FsStoryboardStore(config.project.storyboard, YamlStoryboardCodec())

    return Runtime(
        documents=documents,
        storyboard=storyboard,
        idgen=HexId(),
        config=config,
    )
