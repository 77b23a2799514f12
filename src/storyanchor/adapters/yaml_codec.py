import io
import yaml
from typing import Any
from ..core.hashing import format_hash, parse_hash
from ..core.model import BlockAnchor, Shot
from ..core.ports import StoryboardCodec
from ..errors import StoryboardError


def anchor_to_data(anchor: BlockAnchor) -> dict[str, Any]:
    return {
        "blockId": anchor.block_id,
        "documentId": anchor.document_id,
        "prefixHash": format_hash(anchor.prefix_hash),
        "suffixHash": format_hash(anchor.suffix_hash),
        "textSnapshot": anchor.text_snapshot,
    }


def anchor_from_data(data: Any) -> BlockAnchor:
    if not isinstance(data, dict):
        raise StoryboardError(f"linkedBlock must be a mapping, got {type(data).__name__}")
    try:
        return BlockAnchor(
            block_id=str(data["blockId"]),
            document_id=str(data["documentId"]),
            prefix_hash=parse_hash(data["prefixHash"]),
            suffix_hash=parse_hash(data["suffixHash"]),
            text_snapshot=str(data.get("textSnapshot") or ""),
        )
    except KeyError as e:
        raise StoryboardError(f"linkedBlock is missing {e.args[0]}") from e
    except (TypeError, ValueError) as e:
        raise StoryboardError(f"linkedBlock has a malformed hash: {e}") from e


def shot_to_data(shot: Shot) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": shot.id,
        "assetId": shot.asset_id,
        "order": shot.order,
    }
    if shot.duration_ms is not None:
        data["durationMs"] = shot.duration_ms
    data["linkedBlock"] = anchor_to_data(shot.linked_block) if shot.linked_block else None
    data["isUnlinked"] = shot.is_unlinked
    return data


def shot_from_data(data: Any) -> Shot:
    if not isinstance(data, dict):
        raise StoryboardError(f"Shot must be a mapping, got {type(data).__name__}")
    if "id" not in data:
        raise StoryboardError("Shot is missing id")
    linked = data.get("linkedBlock")
    duration = data.get("durationMs")
    try:
        return Shot(
            id=str(data["id"]),
            asset_id=str(data.get("assetId", "")),
            order=int(data.get("order", 0)),
            duration_ms=int(duration) if duration is not None else None,
            linked_block=anchor_from_data(linked) if linked is not None else None,
            is_unlinked=bool(data.get("isUnlinked", False)),
        )
    except (TypeError, ValueError) as e:
        raise StoryboardError(f"Shot {data['id']} is malformed: {e}") from e


class YamlStoryboardCodec(StoryboardCodec):
    def decode(self, text: str) -> list[Shot]:
        try:
            data = yaml.safe_load(io.StringIO(text)) or {}
        except yaml.YAMLError as e:
            raise StoryboardError(f"Invalid storyboard YAML: {e}") from e
        if not isinstance(data, dict):
            raise StoryboardError("Storyboard must be a mapping with a 'shots' list")
        shots = data.get("shots") or []
        if not isinstance(shots, list):
            raise StoryboardError("'shots' must be a list")
        return [shot_from_data(s) for s in shots]

    def encode(self, shots: list[Shot]) -> str:
        buf = io.StringIO()
        yaml.safe_dump(
            {"shots": [shot_to_data(s) for s in shots]},
            buf,
            sort_keys=False,
            allow_unicode=True,
        )
        return buf.getvalue()
