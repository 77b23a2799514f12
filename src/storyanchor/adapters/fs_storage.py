import json
import logging
from pathlib import Path
from typing import Any, Iterable

from ..core.model import Shot
from ..core.ports import DocumentStore, StoryboardCodec, StoryboardStore
from ..errors import DocumentLoadError

logger = logging.getLogger(__name__)


class FsDocumentStore(DocumentStore):
    def __init__(self, root: Path):
        self.root = root

    def _path(self, id: str) -> Path:
        return self.root / f"{id}.json"

    def read(self, id: str) -> dict[str, Any] | None:
        p = self._path(id)
        if not p.exists():
            return None
        try:
            return json.loads(p.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise DocumentLoadError(f"Cannot read document {id}: {e}") from e

    def write(self, id: str, document: dict[str, Any]) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        self._path(id).write_text(json.dumps(document, indent=2), encoding="utf-8")

    def list_all_ids(self) -> Iterable[str]:
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.json"))

    def load_all(self) -> dict[str, Any]:
        """Every readable document by id. Unreadable files are skipped with a warning."""
        documents: dict[str, Any] = {}
        for id in self.list_all_ids():
            try:
                document = self.read(id)
            except DocumentLoadError as e:
                logger.warning(str(e))
                continue
            if document is not None:
                documents[id] = document
        return documents


class FsStoryboardStore(StoryboardStore):
    def __init__(self, path: Path, codec: StoryboardCodec):
        self.path = path
        self.codec = codec

    def load(self) -> list[Shot]:
        if not self.path.exists():
            return []
        return self.codec.decode(self.path.read_text(encoding="utf-8"))

    def save(self, shots: list[Shot]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.codec.encode(shots), encoding="utf-8")
