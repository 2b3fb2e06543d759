"""Single-shot publish of assembled blocks to a Kafka REST proxy.

One POST per call to ``{scheme}://{host}[:{port}]/topics/{topic}``. There is
no retry and no batching: a failure is reported to the caller as
``PublishFailed`` and the payload is dropped.
"""

from __future__ import annotations

import bittensor as bt
import httpx
from pydantic import BaseModel, ConfigDict, Field

from horizon_blocks.problem import PublishFailed

from .models import KAFKA_JSON_CONTENT_TYPE, BlockData, PublishReply

DEFAULT_PORTS = {"http": 80, "https": 443}


class PublishTarget(BaseModel):
    """Where blocks are published. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    host: str = Field(min_length=1)
    port: int | None = 80
    topic: str = Field(min_length=1)
    scheme: str = Field(default="http", pattern=r"^https?$")
    timeout: float = 30.0

    def topic_url(self) -> str:
        """Build the produce URL, omitting the port when it is the scheme default."""
        if self.port is None or self.port == DEFAULT_PORTS[self.scheme]:
            return f"{self.scheme}://{self.host}/topics/{self.topic}"
        return f"{self.scheme}://{self.host}:{self.port}/topics/{self.topic}"


class KafkaPublisher:
    """Posts a ``BlockData`` document to the configured topic."""

    def __init__(self, target: PublishTarget, transport: httpx.AsyncBaseTransport | None = None):
        self.target = target
        self._client = httpx.AsyncClient(timeout=target.timeout, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def publish(self, blocks: BlockData) -> PublishReply:
        url = self.target.topic_url()
        headers = {
            "Content-Type": KAFKA_JSON_CONTENT_TYPE,
            "Host": self.target.host,
        }

        try:
            resp = await self._client.post(url, content=blocks.to_json().encode(), headers=headers)
            # Drain the body; its content is not used
            await resp.aread()
        except httpx.HTTPError as e:
            bt.logging.error({"kafka_publish": {"url": url, "status": "error", "error": str(e)}})
            raise PublishFailed() from e

        if not resp.is_success:
            bt.logging.error({"kafka_publish": {"url": url, "status": resp.status_code}})
            raise PublishFailed()

        bt.logging.info({
            "kafka_publish": {
                "status": "success",
                "topic": self.target.topic,
                "ledgers": len(blocks.records),
            }
        })
        return PublishReply()


__all__ = ["DEFAULT_PORTS", "KafkaPublisher", "PublishTarget"]
