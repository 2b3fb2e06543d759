# The MIT License (MIT)
# Copyright © 2023 Yuma Rao
# Copyright © 2023 Opentensor Foundation

# Permission is hereby granted, free of charge, to any person obtaining a copy of this software and associated
# documentation files (the “Software”), to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so, subject to the following conditions:

# The above copyright notice and this permission notice shall be included in all copies or substantial portions of
# the Software.

# THE SOFTWARE IS PROVIDED “AS IS”, WITHOUT WARRANTY OF ANY KIND, EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO
# THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL
# THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION
# OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER
# DEALINGS IN THE SOFTWARE.

from __future__ import annotations

import argparse
import os
from typing import Any, Mapping, Sequence

import bittensor as bt
from pydantic import BaseModel, Field

from horizon_blocks.blocks.publisher import PublishTarget

ENV_PREFIX = "HORIZON_BLOCKS__"


class ServiceSettings(BaseModel):
    """Resolved runtime settings for the block server."""

    database_url: str = Field(min_length=1)
    core_database_url: str | None = None
    host: str = "0.0.0.0"
    port: int = 8000
    stale_threshold: int = 0
    state_refresh_interval: float = 5.0
    publish: PublishTarget | None = None


def add_args(parser: argparse.ArgumentParser) -> None:
    """
    Adds relevant arguments to the parser for operation.
    """

    parser.add_argument(
        "--history.database_url",
        type=str,
        help="SQLAlchemy async URL of the history database.",
        default=None,
    )

    parser.add_argument(
        "--core.database_url",
        type=str,
        help="SQLAlchemy async URL of the core node database (enables the freshness check).",
        default=None,
    )

    parser.add_argument(
        "--history.stale_threshold",
        type=int,
        help="Max ledgers history may trail core before requests fail. 0 disables.",
        default=0,
    )

    parser.add_argument(
        "--history.refresh_interval",
        type=float,
        help="Seconds between refreshes of the retained ledger range.",
        default=5.0,
    )

    parser.add_argument("--server.host", type=str, help="Bind address.", default="0.0.0.0")
    parser.add_argument("--server.port", type=int, help="Bind port.", default=8000)

    parser.add_argument(
        "--kafka.host",
        type=str,
        help="Kafka REST proxy host. Publishing is disabled when unset.",
        default=None,
    )
    parser.add_argument("--kafka.port", type=int, help="Kafka REST proxy port.", default=80)
    parser.add_argument("--kafka.topic", type=str, help="Topic blocks are produced to.", default=None)
    parser.add_argument(
        "--kafka.scheme",
        type=str,
        choices=["http", "https"],
        help="Scheme used to reach the proxy.",
        default="http",
    )
    parser.add_argument(
        "--kafka.timeout",
        type=float,
        help="Timeout in seconds for the publish request.",
        default=30.0,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Horizon block range server")
    bt.logging.add_args(parser)
    add_args(parser)
    return parser


def _env(environ: Mapping[str, str], dotted: str) -> str | None:
    """``kafka.host`` -> ``HORIZON_BLOCKS__KAFKA__HOST``."""
    return environ.get(ENV_PREFIX + dotted.replace(".", "__").upper()) or None


def _opt(args: argparse.Namespace, environ: Mapping[str, str], dotted: str) -> Any:
    # Environment variables have HIGHEST priority (override CLI)
    value = _env(environ, dotted)
    if value is not None:
        return value
    return getattr(args, dotted, None)


def settings_from_args(
    args: argparse.Namespace, environ: Mapping[str, str] | None = None,
) -> ServiceSettings:
    """Merge CLI arguments and environment overrides into ``ServiceSettings``."""
    environ = os.environ if environ is None else environ

    publish = None
    kafka_host = _opt(args, environ, "kafka.host")
    if kafka_host:
        publish = PublishTarget(
            host=kafka_host,
            port=int(_opt(args, environ, "kafka.port")),
            topic=_opt(args, environ, "kafka.topic") or "",
            scheme=_opt(args, environ, "kafka.scheme"),
            timeout=float(_opt(args, environ, "kafka.timeout")),
        )

    return ServiceSettings(
        database_url=_opt(args, environ, "history.database_url") or "",
        core_database_url=_opt(args, environ, "core.database_url"),
        host=_opt(args, environ, "server.host"),
        port=int(_opt(args, environ, "server.port")),
        stale_threshold=int(_opt(args, environ, "history.stale_threshold")),
        state_refresh_interval=float(_opt(args, environ, "history.refresh_interval")),
        publish=publish,
    )


def load_settings(
    argv: Sequence[str] | None = None, environ: Mapping[str, str] | None = None,
) -> tuple[ServiceSettings, argparse.Namespace]:
    """Parse ``argv`` and return resolved settings plus the raw namespace."""
    args = build_parser().parse_args(argv)
    return settings_from_args(args, environ), args


__all__ = [
    "ENV_PREFIX",
    "ServiceSettings",
    "add_args",
    "build_parser",
    "load_settings",
    "settings_from_args",
]
