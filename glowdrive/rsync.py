"""Serve the driver's executable and related files to agents, and fetch them.

The server answers ``/list`` with a JSON list of file names and CRC-32
checksums, and ``/file/<name>`` with the file's content. The client skips
files whose local copy already has the same checksum.
"""

from __future__ import annotations

import json
import logging
import os
import ssl
import threading
import urllib.error
import urllib.parse
import urllib.request
import zlib
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

SCHEME_PREFIX = "http://"
_CHUNK_SIZE = 64 * 1024
_fetch_lock = threading.Lock()


class FetchError(Exception):
    """Raised when files cannot be listed, downloaded or written."""


@dataclass
class FileHash:
    """A served file: its base name, CRC-32 checksum and local path."""

    file: str
    hash: int
    full_path: str = ""

    def to_json(self) -> dict:
        data: dict = {}
        if self.file:
            data["file"] = self.file
        if self.hash:
            data["hash"] = self.hash
        return data


def generate_file_hash(file_name: str) -> FileHash:
    """Compute the CRC-32 (IEEE) checksum of a file."""
    crc = 0
    with open(file_name, "rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            crc = zlib.crc32(chunk, crc)
    return FileHash(file=os.path.basename(file_name), hash=crc, full_path=file_name)


class RsyncServer:
    """An HTTP server offering the executable and related files."""

    def __init__(self, executable_file: str, related_files: Iterable[str] = ()) -> None:
        self.executable_file = executable_file
        self.related_files = list(related_files)
        self.ip = ""
        self.port = 0
        self.file_hashes: list[FileHash] = []
        self._server: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[threading.Thread] = None
        for name in [executable_file, *self.related_files]:
            try:
                self.file_hashes.append(generate_file_hash(name))
            except OSError as err:
                logger.warning("Failed to read %s: %s", name, err)

    def executable_file_hash(self) -> str:
        """The executable's checksum as 8 hex digits, or '' if it was unreadable."""
        if not self.file_hashes:
            return ""
        return f"{self.file_hashes[0].hash:08x}"

    def _find(self, name: str) -> Optional[FileHash]:
        return next((fh for fh in self.file_hashes if fh.file == name), None)

    def start(self, listen_on: str, ssl_context: Optional[ssl.SSLContext] = None) -> None:
        """Listen on ``host:port`` (port 0 picks a free one) in a background thread."""
        host, _, port = listen_on.rpartition(":")
        server = ThreadingHTTPServer((host, int(port or 0)), _make_handler(self))
        server.daemon_threads = True
        if ssl_context is not None:
            server.socket = ssl_context.wrap_socket(server.socket, server_side=True)
        self.ip, self.port = server.server_address[:2]
        self._server = server
        self._thread = threading.Thread(target=server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop serving and release the port."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join()
        self._server = None
        self._thread = None


def _make_handler(rs: RsyncServer) -> type[BaseHTTPRequestHandler]:
    class Handler(BaseHTTPRequestHandler):
        def do_GET(self) -> None:
            path = urllib.parse.urlsplit(self.path).path
            if path == "/list":
                self._send_list()
            elif path.startswith("/file/"):
                self._send_file(urllib.parse.unquote(path[len("/file/"):]))
            else:
                self.send_error(404)

        def _send_list(self) -> None:
            result: dict = {}
            if rs.file_hashes:
                result["files"] = [fh.to_json() for fh in rs.file_hashes]
            body = json.dumps(result).encode()
            self.send_response(202)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _send_file(self, name: str) -> None:
            fh = rs._find(name)
            if fh is None:
                self.send_error(404)
                return
            try:
                with open(fh.full_path, "rb") as f:
                    body = f.read()
            except OSError:
                logger.warning("Can not read file: %s", fh.full_path)
                self.send_error(404)
                return
            self.send_response(200)
            self.send_header("Content-Type", "application/octet-stream")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format: str, *args) -> None:
            logger.debug(format, *args)

    return Handler


def _get(url: str) -> bytes:
    with urllib.request.urlopen(url) as response:
        return response.read()


def list_files(server: str) -> list[FileHash]:
    """Ask a driver at ``host:port`` which files it offers."""
    try:
        data = json.loads(_get(SCHEME_PREFIX + server + "/list"))
    except (OSError, ValueError) as err:
        raise FetchError(f"Failed to list files: {err}") from err
    return [
        FileHash(file=item.get("file", ""), hash=item.get("hash", 0))
        for item in data.get("files") or []
    ]


def fetch_url(file_url: str, dest_file: str) -> None:
    """Download a URL into a file marked executable."""
    try:
        content = _get(file_url)
    except OSError as err:
        raise FetchError(f"Failed to read from {file_url}: {err}") from err
    try:
        with open(dest_file, "wb") as f:
            f.write(content)
        os.chmod(dest_file, 0o755)
    except OSError as err:
        raise FetchError(f"Failed to write {dest_file}: {err}") from err


def fetch_files_to(driver_address: str, directory: str) -> None:
    """Copy every file the driver offers into a directory, skipping unchanged ones."""
    with _fetch_lock:
        for fh in list_files(driver_address):
            to_file = os.path.join(directory, os.path.basename(fh.file))
            try:
                if generate_file_hash(to_file).hash == fh.hash:
                    continue
            except OSError:
                pass
            url = SCHEME_PREFIX + driver_address + "/file/" + urllib.parse.quote(fh.file)
            try:
                fetch_url(url, to_file)
            except FetchError as err:
                raise FetchError(f"Failed to download file {fh.file}: {err}") from err