"""Watch mode for storyanchor - repair shot links whenever documents change."""

import json
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Any, Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class DebounceHandler(FileSystemEventHandler):
    """File system event handler with debouncing."""

    def __init__(
        self,
        documents_path: Path,
        on_batch: Callable[[set[str], set[str]], None] | None,
        debounce_ms: int = 150,
    ):
        super().__init__()
        self.documents_path = documents_path
        self.on_batch = on_batch
        self.debounce_ms = debounce_ms

        # Pending document ids
        self.changed: set[str] = set()
        self.deleted: set[str] = set()
        self.last_event_time = 0.0

    def _extract_id(self, path: Path) -> str | None:
        """Document ID for a path, or None for files that are not documents."""
        name = path.name
        if name.startswith(".") or name.endswith("~") or name.endswith(".swp"):
            return None
        if not name.endswith(".json"):
            return None
        return path.stem

    def _record(self, event: FileSystemEvent, bucket: set[str]) -> None:
        if event.is_directory:
            return
        doc_id = self._extract_id(Path(str(event.src_path)))
        if doc_id:
            bucket.add(doc_id)
            self.last_event_time = time.time()

    def on_created(self, event: FileSystemEvent) -> None:
        self._record(event, self.changed)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._record(event, self.changed)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._record(event, self.deleted)

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors commonly save via write-to-temp then rename
        self._record(event, self.deleted)
        dest = getattr(event, "dest_path", None)
        if dest and not event.is_directory:
            doc_id = self._extract_id(Path(str(dest)))
            if doc_id:
                self.changed.add(doc_id)
                self.last_event_time = time.time()

    def check_and_flush(self) -> None:
        """Check if debounce period has elapsed and flush if so."""
        if not (self.changed or self.deleted):
            return

        elapsed = (time.time() - self.last_event_time) * 1000
        if elapsed >= self.debounce_ms:
            self.flush()

    def flush(self) -> None:
        """Process accumulated events."""
        if not (self.changed or self.deleted):
            return

        changed = set(self.changed)
        deleted = self.deleted - changed

        self.changed.clear()
        self.deleted.clear()

        if self.on_batch:
            self.on_batch(changed, deleted)


def make_batch_handler(rt: Any, quiet: bool = False, json_output: bool = False) -> Callable[[set[str], set[str]], None]:
    """Batch callback that repairs the storyboard against the current documents."""

    def handle_batch(changed: set[str], deleted: set[str]) -> None:
        start_time = time.time()
        try:
            report = rt.repair(save=True)
        except Exception as e:
            logger.warning(f"Repair failed: {e}")
            if json_output:
                print(json.dumps({"type": "error", "message": str(e)}), flush=True)
            else:
                print(f"Error: {e}", file=sys.stderr, flush=True)
            return

        duration_ms = int((time.time() - start_time) * 1000)
        if json_output:
            event = {
                "type": "batch",
                "changed": sorted(changed),
                "deleted": sorted(deleted),
                "relinked": sorted(report.changed - report.unlinked),
                "unlinked": sorted(report.unlinked),
                "duration_ms": duration_ms,
            }
            print(json.dumps(event), flush=True)
        elif not quiet:
            print(
                f"Repaired: {len(report.changed)} changed, "
                f"{len(report.unlinked)} unlinked ({duration_ms}ms)",
                flush=True,
            )

    return handle_batch


def watch_documents(
    rt: Any,
    debounce_ms: int = 150,
    quiet: bool = False,
    json_output: bool = False,
) -> int:
    """
    Watch the documents directory and repair shots after each batch of edits.

    Args:
        rt: Runtime instance
        debounce_ms: Debounce window in milliseconds
        quiet: Suppress output
        json_output: Output JSON events instead of human-readable

    Returns:
        Exit code
    """
    documents_path = rt.config.project.documents
    if not documents_path.exists():
        print(f"Error: Documents directory not found: {documents_path}", file=sys.stderr)
        return 1

    running = True

    def signal_handler(signum: int, frame: Any) -> None:
        nonlocal running
        running = False
        if not quiet and not json_output:
            print("\nShutting down...", flush=True)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    handle_batch = make_batch_handler(rt, quiet=quiet, json_output=json_output)

    # Bring the storyboard up to date before waiting for edits
    handle_batch(set(), set())

    handler = DebounceHandler(documents_path, handle_batch, debounce_ms)
    observer = Observer()
    observer.schedule(handler, str(documents_path), recursive=False)

    if not quiet and not json_output:
        print(f"Watching {documents_path} (debounce: {debounce_ms}ms)", flush=True)
        print("Press Ctrl+C to stop", flush=True)

    observer.start()

    try:
        while running:
            time.sleep(0.1)
            handler.check_and_flush()
    finally:
        handler.flush()
        observer.stop()
        observer.join()

    if not quiet and not json_output:
        print("Watch stopped", flush=True)

    return 0
