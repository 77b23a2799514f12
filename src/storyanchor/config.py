"""Configuration loader for storyanchor.toml."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

CONFIG_FILENAME = "storyanchor.toml"


@dataclass(frozen=True)
class AnchorConfig:
    """Tunable matching heuristics."""
    context_window: int = 50  # chars hashed on each side of a block
    acceptance_threshold: float = 2.0  # minimum fuzzy score to accept


@dataclass(frozen=True)
class DurationConfig:
    """Shot duration estimation."""
    words_per_minute: int = 150
    min_ms: int = 3000
    max_ms: int = 15000
    default_ms: int = 3500


@dataclass
class ProjectConfig:
    """Project layout."""
    root: Path
    documents: Path
    storyboard: Path


@dataclass
class LogConfig:
    level: str = "WARNING"


@dataclass
class StoryanchorConfig:
    """Complete storyanchor configuration."""
    project: ProjectConfig
    anchoring: AnchorConfig = field(default_factory=AnchorConfig)
    duration: DurationConfig = field(default_factory=DurationConfig)
    log: LogConfig = field(default_factory=LogConfig)


DEFAULT_ANCHOR_CONFIG = AnchorConfig()
DEFAULT_DURATION_CONFIG = DurationConfig()


def load_config(config_path: Path | None = None, project_path: Path | None = None) -> StoryanchorConfig:
    """
    Load configuration from storyanchor.toml.

    Search order:
    1. config_path (if provided)
    2. cwd/storyanchor.toml
    3. project_path/storyanchor.toml

    Relative ``documents`` and ``storyboard`` paths resolve against the
    project root.
    """
    toml_data: dict[str, Any] = {}

    search_paths = []
    if config_path:
        search_paths.append(config_path)
    search_paths.append(Path.cwd() / CONFIG_FILENAME)
    if project_path:
        search_paths.append(project_path / CONFIG_FILENAME)

    for path in search_paths:
        if path.exists():
            with open(path, "rb") as f:
                toml_data = tomllib.load(f)
            break

    project_data = toml_data.get("project", {})
    root = Path(project_data.get("root", project_path or Path(".")))
    project_config = ProjectConfig(
        root=root,
        documents=root / project_data.get("documents", "documents"),
        storyboard=root / project_data.get("storyboard", "storyboard.yaml"),
    )

    anchoring_data = toml_data.get("anchoring", {})
    anchoring_config = AnchorConfig(
        context_window=int(anchoring_data.get("context_window", 50)),
        acceptance_threshold=float(anchoring_data.get("acceptance_threshold", 2.0)),
    )

    duration_data = toml_data.get("duration", {})
    duration_config = DurationConfig(
        words_per_minute=int(duration_data.get("words_per_minute", 150)),
        min_ms=int(duration_data.get("min_ms", 3000)),
        max_ms=int(duration_data.get("max_ms", 15000)),
        default_ms=int(duration_data.get("default_ms", 3500)),
    )

    log_data = toml_data.get("log", {})
    log_config = LogConfig(level=str(log_data.get("level", "WARNING")).upper())

    return StoryanchorConfig(
        project=project_config,
        anchoring=anchoring_config,
        duration=duration_config,
        log=log_config,
    )
