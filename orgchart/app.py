"""Application assembly and the command that serves it."""

from __future__ import annotations

import argparse
import json
import logging
import sqlite3
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from wsgiref.simple_server import make_server

from .departments import DepartmentsController
from .http import Router
from .jobs import JobsController
from .mapper import create_schema

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "../config.json"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_DATABASE = "org_chart.db"


@dataclass(frozen=True)
class Config:
    """Where to listen and which database file to use."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    database: str = DEFAULT_DATABASE


def _first(data: dict[str, Any], key: str) -> dict[str, Any]:
    entries = data.get(key) or []
    if not isinstance(entries, list):
        raise ValueError(f"{key} must be a list")
    if entries and not isinstance(entries[0], dict):
        raise ValueError(f"entries of {key} must be objects")
    return entries[0] if entries else {}


def load_config(path: str | Path) -> Config:
    """Read a JSON configuration with ``listeners`` and ``db_clients`` lists."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("configuration must be a JSON object")
    listener = _first(data, "listeners")
    client = _first(data, "db_clients")
    port = listener.get("port", DEFAULT_PORT)
    if isinstance(port, bool) or not isinstance(port, int) or not 0 <= port <= 65535:
        raise ValueError(f"invalid port: {port!r}")
    return Config(
        host=str(listener.get("address", DEFAULT_HOST)),
        port=port,
        database=str(client.get("filename") or client.get("dbname") or DEFAULT_DATABASE),
    )


def create_app(connection: sqlite3.Connection) -> Router:
    """Create the schema and return a router serving all resources."""
    create_schema(connection)
    router = Router()
    DepartmentsController(connection).register(router)
    JobsController(connection).register(router)
    return router


def main(argv: list[str] | None = None) -> int:
    """Load the configuration and serve the application until interrupted."""
    parser = argparse.ArgumentParser(description="Serve the organisation chart API.")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="configuration file")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG)
    log.debug("Load config file")
    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        print(f"cannot load {args.config}: {exc}", file=sys.stderr)
        return 1

    connection = sqlite3.connect(config.database, check_same_thread=False)
    try:
        app = create_app(connection)
        with make_server(config.host, config.port, app) as server:
            log.debug("running on %s:%d", config.host, config.port)
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                pass
    finally:
        connection.close()
    return 0