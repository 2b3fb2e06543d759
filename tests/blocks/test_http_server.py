"""HTTP integration test.

Spins up a real LedgerBlocksServer on localhost over a seeded SQLite
history database and fetches block ranges with an httpx client, including
the publish path against a stub Kafka REST proxy.
"""

from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest
from aiohttp import web
from aiohttp.test_utils import unused_port
from sqlalchemy.ext.asyncio import async_sessionmaker

from horizon_blocks.blocks.action import SendAction
from horizon_blocks.blocks.http_server import LedgerBlocksServer
from horizon_blocks.blocks.publisher import KafkaPublisher, PublishTarget
from horizon_blocks.history.database import HistoryDatabase
from horizon_blocks.history.loader import BatchLoader
from horizon_blocks.history.schema import Base, HistoryLedger, HistoryOperation, HistoryTransaction
from horizon_blocks.history.state import LedgerStateTracker

SRC = "GAAZI4TCR3TY5OJHCTJC2A4QSY6CJWJH5IAJTGKIN2ER7LBNVKOCCWN7"


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'history.db'}"


async def _seed(database: HistoryDatabase, first: int = 100, count: int = 3) -> None:
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    rows = []
    for seq in range(first, first + count):
        tx_id = (seq << 32) | (1 << 12)
        rows += [
            HistoryLedger(
                id=seq << 32, sequence=seq, ledger_hash=f"{seq:064x}",
                transaction_count=1, operation_count=1,
                closed_at=datetime(2019, 1, 1, tzinfo=timezone.utc),
                total_coins=1_000_000_000_000_000_000, fee_pool=0,
                base_fee=100, base_reserve=5_000_000, max_tx_set_size=50,
            ),
            HistoryTransaction(
                id=tx_id, transaction_hash=f"{tx_id:064x}", ledger_sequence=seq,
                application_order=1, account=SRC, account_sequence=1,
                max_fee=100, fee_charged=100, operation_count=1,
            ),
            HistoryOperation(
                id=tx_id | 1, transaction_id=tx_id, application_order=1, type=0,
                details="{}",
            ),
        ]
    async with async_sessionmaker(database.engine)() as session:
        session.add_all(rows)
        await session.commit()


class _Stack:
    """History DB + server (+ optional stub proxy) wired together."""

    def __init__(self, db_url: str, publish: bool = False, proxy_status: int = 200):
        self.database = HistoryDatabase(db_url)
        self.port = unused_port()
        self.proxy_port = unused_port()
        self.proxy_status = proxy_status
        self.produced: list[dict] = []
        self.publisher = None
        if publish:
            self.publisher = KafkaPublisher(
                PublishTarget(host="127.0.0.1", port=self.proxy_port, topic="ledgers"),
            )
        self._proxy_runner: web.AppRunner | None = None

    async def _produce(self, request: web.Request) -> web.Response:
        self.produced.append(await request.json())
        return web.json_response({"offsets": []}, status=self.proxy_status)

    async def __aenter__(self) -> "_Stack":
        await _seed(self.database)
        tracker = LedgerStateTracker(self.database, interval=0)
        await tracker.refresh()
        action = SendAction(
            loader=BatchLoader(self.database), state=tracker.current, publisher=self.publisher,
        )
        self.server = LedgerBlocksServer(action=action, state=tracker.current, host="127.0.0.1", port=self.port)
        await self.server.start()

        if self.publisher is not None:
            app = web.Application()
            app.router.add_post("/topics/{topic}", self._produce)
            self._proxy_runner = web.AppRunner(app)
            await self._proxy_runner.setup()
            await web.TCPSite(self._proxy_runner, "127.0.0.1", self.proxy_port).start()

        self.client = httpx.AsyncClient(base_url=f"http://127.0.0.1:{self.port}", timeout=10.0)
        return self

    async def __aexit__(self, *exc) -> None:
        await self.client.aclose()
        await self.server.stop()
        if self._proxy_runner:
            await self._proxy_runner.cleanup()
        if self.publisher is not None:
            await self.publisher.close()
        await self.database.dispose()


@pytest.mark.asyncio
class TestHTTPServer:

    async def test_returns_nested_records(self, db_url):
        async with _Stack(db_url) as stack:
            resp = await stack.client.get("/blocks", params={"ledger_start": 100, "ledger_end": 101})

        assert resp.status_code == 200
        records = resp.json()["records"]
        assert [r["value"]["sequence"] for r in records] == [100, 101]
        tx = records[0]["value"]["transactions"][0]
        assert tx["ledger"] == 100
        op = tx["operations"][0]
        assert op["type"] == "create_account"
        assert op["source_account"] == SRC
        assert "prev_hash" not in records[0]["value"]
        assert "failed_transaction_count" not in records[0]["value"]

    async def test_range_past_latest_is_empty(self, db_url):
        async with _Stack(db_url) as stack:
            resp = await stack.client.get("/blocks", params={"ledger_start": 500, "ledger_end": 600})

        assert resp.status_code == 200
        assert resp.json() == {"records": []}

    async def test_before_history_problem(self, db_url):
        async with _Stack(db_url) as stack:
            resp = await stack.client.get("/blocks", params={"ledger_start": 50, "ledger_end": 101})

        assert resp.status_code == 410
        assert resp.headers["Content-Type"].startswith("application/problem+json")
        assert resp.json()["type"] == "before_history"

    async def test_missing_end_is_bad_request(self, db_url):
        async with _Stack(db_url) as stack:
            resp = await stack.client.get("/blocks", params={"ledger_start": 100})

        assert resp.status_code == 400
        body = resp.json()
        assert body["type"] == "bad_request"
        assert body["extras"]["invalid_field"] == "ledger_end"

    async def test_publish_path(self, db_url):
        async with _Stack(db_url, publish=True) as stack:
            resp = await stack.client.get(
                "/blocks", params={"ledger_start": 100, "ledger_end": 102, "send_kafka": "true"},
            )
            produced = list(stack.produced)

        assert resp.status_code == 200
        assert resp.json() == {"message": "success"}
        assert len(produced) == 1
        assert [r["value"]["sequence"] for r in produced[0]["records"]] == [100, 101, 102]

    async def test_publish_failure_is_server_error(self, db_url):
        async with _Stack(db_url, publish=True, proxy_status=503) as stack:
            resp = await stack.client.get(
                "/blocks", params={"ledger_start": 100, "ledger_end": 100, "send_kafka": "true"},
            )

        assert resp.status_code == 500
        body = resp.json()
        assert body["type"] == "server_error"
        assert "message" not in body

    async def test_health(self, db_url):
        async with _Stack(db_url) as stack:
            resp = await stack.client.get("/health")

        assert resp.json() == {
            "history_elder_ledger": 100,
            "history_latest_ledger": 102,
            "core_latest_ledger": 102,
        }
