"""
Development server

Serves a built folder over HTTP, watches the source folder for changes and
rebuilds on every change. A temporary build folder is removed again when the
server is interrupted.
"""

import http.server
import shutil
import signal
import socketserver
import tempfile
import threading
import time
from pathlib import Path

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .builder import is_noise
from .errors import BuildError
from .log import Colors, log

WATCHED_EVENTS = {'created', 'modified', 'deleted', 'moved'}


class RebuildHandler(FileSystemEventHandler):
    """Handles file system events and triggers rebuilds.

    Rebuilds never overlap: events that arrive while a rebuild runs are
    coalesced into a single follow-up rebuild.
    """

    def __init__(self, rebuild, build_dir=None, debounce_seconds=0.5):
        self.rebuild = rebuild
        self.build_dir = Path(build_dir).resolve() if build_dir else None
        self.debounce_seconds = debounce_seconds
        self.pending_build = False
        self.building = False
        self.lock = threading.Lock()
        self._worker = None
        self._last_event = (None, None)

    def should_rebuild(self, event):
        if event.event_type not in WATCHED_EVENTS:
            return False
        # Adding a folder changes nothing until files show up in it
        if event.is_directory and event.event_type in ('created', 'modified'):
            return False
        paths = [event.src_path]
        if getattr(event, 'dest_path', None):
            paths.append(event.dest_path)
        return any(self._is_relevant(Path(p)) for p in paths)

    def _is_relevant(self, path):
        if is_noise(path.name):
            return False
        if self.build_dir is not None:
            try:
                path.resolve().relative_to(self.build_dir)
                return False
            except ValueError:
                pass
        return True

    def on_any_event(self, event):
        if not self.should_rebuild(event):
            return
        log(f"File {event.src_path} modified ({event.event_type}), rebuilding...", Colors.YELLOW)
        self.trigger_build(event.event_type, event.src_path)

    def trigger_build(self, event_type=None, path=None):
        """Schedule a rebuild unless one is already pending"""
        with self.lock:
            self._last_event = (event_type, path)
            self.pending_build = True
            if self.building:
                return
            self.building = True
        self._worker = threading.Thread(target=self._drain, daemon=True)
        self._worker.start()

    def _drain(self):
        while True:
            time.sleep(self.debounce_seconds)
            with self.lock:
                if not self.pending_build:
                    self.building = False
                    return
                self.pending_build = False
                event = self._last_event
            self._run_build(*event)

    def _run_build(self, event_type, path):
        try:
            self.rebuild(event_type, path)
        except BuildError as e:
            log(f"Build failed: {e}", Colors.RED)
        except Exception as e:
            log(f"Build error: {e}", Colors.RED)

    def join(self, timeout=None):
        """Wait for the current rebuild cycle to finish"""
        worker = self._worker
        if worker is not None:
            worker.join(timeout)


def start_watcher(folder, handler):
    observer = Observer()
    observer.schedule(handler, str(folder), recursive=True)
    observer.start()
    log(f"Watching folder {folder} for changes", Colors.CYAN)
    return observer


class StaticHTTPHandler(http.server.SimpleHTTPRequestHandler):
    """Static file handler that disables caching"""

    def end_headers(self):
        self.send_header('Cache-Control', 'no-cache, no-store, must-revalidate')
        super().end_headers()

    def log_message(self, format, *args):
        if not args:
            return
        try:
            path = str(args[0]).split()[1]
        except IndexError:
            return
        status = str(args[1]) if len(args) > 1 else '?'
        if status == '200':
            color = Colors.GREEN
        elif status == '304':
            color = Colors.GRAY
        elif status.startswith('4'):
            color = Colors.YELLOW
        else:
            color = Colors.RED
        log(f"{color}{status}{Colors.RESET} {path}")


def create_handler(directory):
    """Create a handler class serving ``directory``"""
    class ConfiguredHandler(StaticHTTPHandler):
        def __init__(self, *args, **kwargs):
            kwargs['directory'] = str(directory)
            super().__init__(*args, **kwargs)
    return ConfiguredHandler


class ReusableTCPServer(socketserver.TCPServer):
    allow_reuse_address = True


def start_http(build_dir, port=0):
    """Bind the HTTP server; port 0 lets the OS pick a free one"""
    log("Starting HTTP server...")
    httpd = ReusableTCPServer(("", port or 0), create_handler(build_dir))
    log(f"Serving HTTP server on http://localhost:{httpd.server_address[1]}", Colors.GREEN)
    return httpd


def serve(source_dir, build_dir, rebuild, port=0):
    """Serve ``build_dir`` and rebuild it whenever ``source_dir`` changes.

    Blocks until interrupted.
    """
    handler = RebuildHandler(rebuild, build_dir=build_dir)
    observer = start_watcher(source_dir, handler)
    httpd = start_http(build_dir, port)
    log("Press Ctrl+C to stop", Colors.GRAY)
    try:
        with httpd:
            httpd.serve_forever()
    except KeyboardInterrupt:
        print()
        log("Shutting down...", Colors.YELLOW)
    finally:
        observer.stop()
        observer.join()


class ScopedBuildDir:
    """Temporary build folder that is removed on exit, Ctrl+C or SIGTERM.

    Termination signals are turned into ``SystemExit`` while the block runs
    so that the folder is removed on the way out.
    """

    SIGNALS = ('SIGTERM', 'SIGHUP', 'SIGUSR1', 'SIGUSR2')

    def __init__(self, prefix='producify_'):
        self.prefix = prefix
        self.path = None
        self._previous = {}

    def __enter__(self):
        self.path = Path(tempfile.mkdtemp(prefix=self.prefix))
        for name in self.SIGNALS:
            signum = getattr(signal, name, None)
            if signum is not None:
                self._previous[signum] = signal.signal(signum, self._on_signal)
        return self.path

    def _on_signal(self, signum, frame):
        raise SystemExit(128 + signum)

    def __exit__(self, exc_type, exc, tb):
        for signum, handler in self._previous.items():
            signal.signal(signum, handler)
        self._previous.clear()
        log("Cleaning up...")
        shutil.rmtree(self.path, ignore_errors=True)
        return False
