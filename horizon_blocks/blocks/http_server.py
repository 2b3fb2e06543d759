"""HTTP endpoint serving assembled block ranges.

Routes:
  GET /blocks?ledger_start=N&ledger_end=M[&send_kafka=true]
  GET /health - current retained ledger range
"""

from __future__ import annotations

from typing import Callable

import bittensor as bt
from aiohttp import web

from horizon_blocks.history.state import LedgerState
from horizon_blocks.problem import Problem

from .action import SendAction, SendParams, render


def _problem_response(problem: Problem) -> web.Response:
    return web.json_response(
        problem.to_dict(),
        status=problem.status,
        content_type="application/problem+json",
    )


class LedgerBlocksServer:
    """Lightweight async HTTP server for block range requests."""

    def __init__(
        self,
        action: SendAction,
        state: Callable[[], LedgerState],
        host: str = "0.0.0.0",
        port: int = 8000,
    ):
        self.action = action
        self.state = state
        self.host = host
        self.port = port
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/blocks", self._handle_blocks)
        app.router.add_get("/health", self._handle_health)
        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._app = self.build_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        bt.logging.info({"blocks_http": {"status": "started", "host": self.host, "port": self.port}})

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            bt.logging.info({"blocks_http": "stopped"})

    async def _handle_blocks(self, request: web.Request) -> web.Response:
        try:
            params = SendParams.from_query(request.query)
            body = await self.action.run(params)
        except Problem as p:
            log = bt.logging.error if p.is_server_error else bt.logging.info
            log({
                "blocks_request": {
                    "status": p.status,
                    "type": p.type,
                    "query": dict(request.query),
                    "cause": repr(p.__cause__) if p.__cause__ else None,
                }
            })
            return _problem_response(p)

        bt.logging.info({
            "blocks_request": {
                "status": 200,
                "ledger_start": params.ledger_start,
                "ledger_end": params.ledger_end,
                "send_kafka": params.send_kafka,
            }
        })
        return web.json_response(render(body))

    async def _handle_health(self, request: web.Request) -> web.Response:
        state = self.state()
        return web.json_response({
            "history_elder_ledger": state.history_elder,
            "history_latest_ledger": state.history_latest,
            "core_latest_ledger": state.core_latest,
        })


__all__ = ["LedgerBlocksServer"]
