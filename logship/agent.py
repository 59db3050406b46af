# logship/agent.py
import argparse
import enum
import logging
import os
import threading
import time
from typing import Callable, Optional, Sequence

from pydantic import ValidationError
from watchdog.events import (
    EVENT_TYPE_CLOSED_NO_WRITE,
    EVENT_TYPE_OPENED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from logship.config import AgentConfig, split_paths
from logship.inode import resolve_inode
from logship.reader import read_new_lines
from logship.uploader import BatchUploader, DeliveryError

logger = logging.getLogger(__name__)

# our own reads show up as open/close-without-write events
IGNORED_EVENTS = {EVENT_TYPE_OPENED, EVENT_TYPE_CLOSED_NO_WRITE}


class TailState(enum.Enum):
    IDLE = "idle"
    READING = "reading"
    UPLOADING = "uploading"


class LogTail:
    """Read position and inode of one log file.

    One rotation check + read + upload + advance cycle runs at a time; a
    trigger arriving mid-cycle waits for the lock and then looks again from
    the advanced position.
    """

    def __init__(
        self,
        path: str,
        uploader: BatchUploader,
        resolve: Callable[[str], Optional[int]] = resolve_inode,
        read: Callable[[str, int], tuple[list[str], int]] = read_new_lines,
    ):
        self.path = os.path.abspath(path)
        self.uploader = uploader
        self.resolve = resolve
        self.read = read
        self.last_read_position = 0
        self.current_inode = self.resolve(self.path)
        self.state = TailState.IDLE
        self._lock = threading.Lock()

    def matches(self, path: str) -> bool:
        return os.path.abspath(path) == self.path

    def check_rotation(self) -> bool:
        new_inode = self.resolve(self.path)
        if new_inode is None or new_inode == self.current_inode:
            return False
        logger.info("%s rotated (inode %s -> %s), reading from start", self.path, self.current_inode, new_inode)
        self.current_inode = new_inode
        self.last_read_position = 0
        return True

    def _process(self) -> int:
        self.state = TailState.READING
        lines, consumed = self.read(self.path, self.last_read_position)
        if not lines:
            self.state = TailState.IDLE
            return 0
        self.state = TailState.UPLOADING
        try:
            self.uploader.upload(self.path, lines)
        except DeliveryError as e:
            logger.error("Dropping %d lines from %s: %s", len(lines), self.path, e)
        self.last_read_position += consumed
        self.state = TailState.IDLE
        return len(lines)

    def process_log_file(self) -> int:
        """Ship whatever complete lines follow the last read position."""
        with self._lock:
            return self._process()

    def handle_change(self, path: str) -> int:
        if not self.matches(path):
            return 0
        with self._lock:
            self.check_rotation()
            return self._process()


class TailHandler(FileSystemEventHandler):
    def __init__(self, tail: LogTail):
        self.tail = tail

    def on_any_event(self, event: FileSystemEvent):
        if event.is_directory or event.event_type in IGNORED_EVENTS:
            return
        paths = [event.src_path]
        if getattr(event, "dest_path", ""):
            paths.append(event.dest_path)
        for p in paths:
            p = os.fsdecode(p)
            if not self.tail.matches(p):
                continue
            try:
                self.tail.handle_change(p)
            except Exception:
                logger.exception("Watcher error on %s", p)
            return


class Agent:
    """One LogTail per configured path, all fed by a single watchdog Observer."""

    def __init__(self, config: AgentConfig, uploader: Optional[BatchUploader] = None, observer=None):
        self.config = config
        self.uploader = uploader or BatchUploader(
            config.endpoint,
            timeout=config.timeout,
            attempts=config.attempts,
            retry_delay=config.retry_delay,
        )
        self.tails = [LogTail(p, self.uploader) for p in config.paths]
        self.observer = observer if observer is not None else Observer()

    def start(self):
        for tail in self.tails:
            tail.process_log_file()
            directory = os.path.dirname(tail.path) or "."
            try:
                self.observer.schedule(TailHandler(tail), directory, recursive=False)
            except OSError as e:
                logger.error("Watcher error: cannot watch %s: %s", directory, e)
                continue
            logger.info("Watching %s -> %s", tail.path, self.uploader.url_for(tail.path))
        self.observer.start()

    def stop(self):
        self.observer.stop()
        self.observer.join()

    def run_forever(self):
        self.start()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="logship", description="Tail log files and ship new lines over HTTP")
    parser.add_argument(
        "--file",
        action="append",
        default=[],
        help="Log file to tail; repeat or comma-separate (default: $FILE_PATH)",
    )
    parser.add_argument("--endpoint", help="Collector base URL (default: $LOG_ENDPOINT)")
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser


def load_config(args: argparse.Namespace, environ=None) -> AgentConfig:
    paths: list[str] = []
    for value in args.file:
        paths.extend(split_paths(value))
    return AgentConfig.from_env(environ, paths=paths or None, endpoint=args.endpoint, timeout=args.timeout)


def main(argv: Optional[Sequence[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        config = load_config(args)
    except ValidationError as e:
        parser.error(f"invalid configuration: {e}")
    Agent(config).run_forever()


if __name__ == "__main__":
    main()
