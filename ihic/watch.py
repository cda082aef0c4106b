"""Watch mode: rebuild the pages whenever the source sheet changes.

The watchdog observer thread only raises a flag; builds run on the calling
thread. A change that lands while a build is running therefore queues one
more build instead of starting a second one, and bursts of events (editors
often write a file several times on save) collapse into a single rebuild.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .config import BuildConfig

logger = logging.getLogger(__name__)


class SourceChangeHandler(FileSystemEventHandler):
    """Set ``changed`` when the watched source file is written or replaced."""

    def __init__(self, source_path: Path, changed: threading.Event):
        super().__init__()
        self.source = Path(source_path).resolve()
        self.changed = changed

    def _is_source(self, path) -> bool:
        return Path(os.fsdecode(path)).resolve() == self.source

    def _notify(self, path):
        if self._is_source(path):
            logger.debug("Change detected: %s", path)
            self.changed.set()

    def on_modified(self, event):
        if not event.is_directory:
            self._notify(event.src_path)

    def on_created(self, event):
        if not event.is_directory:
            self._notify(event.src_path)

    def on_moved(self, event):
        # Editors that save through a temp file end with a rename onto the source
        if not event.is_directory:
            self._notify(event.dest_path)


def rebuild_loop(config: BuildConfig,
                 changed: threading.Event,
                 stop: threading.Event,
                 build: Optional[Callable[[BuildConfig], object]] = None,
                 poll_seconds: float = 1.0) -> None:
    """Run ``build`` once per batch of change notifications until ``stop`` is set."""
    if build is None:
        from .generate import run as build

    while not stop.is_set():
        if not changed.wait(timeout=poll_seconds):
            continue
        changed.clear()
        logger.info("Source modified - regenerating files...")
        try:
            build(config)
        except Exception:
            # Keep watching; the next save gets another attempt
            logger.exception("Rebuild failed, waiting for the next change")


def watch(config: BuildConfig, stop: Optional[threading.Event] = None) -> None:
    changed = threading.Event()
    stop = stop or threading.Event()

    source = config.source_path.resolve()
    handler = SourceChangeHandler(source, changed)
    observer = Observer()
    observer.schedule(handler, str(source.parent), recursive=False)
    observer.start()

    logger.info("Watching for changes to %s... (Ctrl+C to stop)", config.source_path)
    try:
        rebuild_loop(config, changed, stop)
    except KeyboardInterrupt:
        logger.info("Stopping watcher...")
    finally:
        observer.stop()
        observer.join()
    logger.info("Watcher stopped.")
