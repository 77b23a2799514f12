from typing import Protocol, Iterable, Any
from .model import DocumentId, Shot, ShotId


class DocumentStore(Protocol):
    """
    Flat store: one directory, documents named <id>.json
    """

    def read(self, id: DocumentId) -> dict[str, Any] | None:
        pass

    def write(self, id: DocumentId, document: dict[str, Any]) -> None:
        pass

    def list_all_ids(self) -> Iterable[DocumentId]:
        pass

    def load_all(self) -> dict[DocumentId, Any]:
        pass


class StoryboardCodec(Protocol):
    """
    Round-trip shots to plain data. Anchors are persisted whole; the codec
    never drops a stale anchor.
    """

    def decode(self, text: str) -> list[Shot]:
        pass

    def encode(self, shots: list[Shot]) -> str:
        pass


class StoryboardStore(Protocol):
    def load(self) -> list[Shot]:
        pass

    def save(self, shots: list[Shot]) -> None:
        pass


class IdGenerator(Protocol):
    def new_id(self) -> ShotId:
        pass
