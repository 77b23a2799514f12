"""Errors raised by the host-side adapters. The anchoring core never raises."""


class StoryanchorError(Exception):
    pass


class DocumentLoadError(StoryanchorError):
    """A document file exists but is not readable JSON."""


class StoryboardError(StoryanchorError):
    """The storyboard file is not a list of well-formed shots."""


class ShotNotFound(StoryanchorError, KeyError):
    def __init__(self, shot_id: str):
        super().__init__(shot_id)
        self.shot_id = shot_id

    def __str__(self) -> str:
        return f"Shot {self.shot_id} not found"
