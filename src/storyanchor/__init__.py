"""storyanchor - anchor storyboard shots to blocks of editable documents."""

__version__ = "0.1.0"
