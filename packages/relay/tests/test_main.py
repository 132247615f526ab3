"""CLI 入口测试

测试内容：
1. print_events 每个事件输出一行 camelCase JSON
2. run_relay 退出时停止中继，并等待在途回执完成而不是取消
"""

import asyncio
import json
from unittest.mock import AsyncMock

from sigrelay.core.models import Classification, ConnectionState, NormalizedEvent
from sigrelay.relay import InboundRelay, ReceiptClient, RelayConfig
from sigrelay.relay.__main__ import print_events, run_relay


class TestPrintEvents:
    def test_one_json_line_per_event(self, capsys):
        print_events(
            [
                NormalizedEvent(timestamp=1, message_text="a", classification=Classification.INCOMING),
                NormalizedEvent(timestamp=2, message_text="b", classification=Classification.SELF_NOTE),
            ]
        )
        lines = capsys.readouterr().out.splitlines()
        assert [json.loads(line)["messageText"] for line in lines] == ["a", "b"]


class TestRunRelay:
    async def test_shutdown_waits_for_in_flight_receipt(
        self, make_connector, make_connection, make_sleep, collector, data_frame, until
    ):
        """退出时回执仍在途：run_relay 返回前回执已完成，没有被取消"""
        outcome: dict[str, bool] = {"done": False}

        async def slow_receipt(recipient, timestamp):
            await asyncio.sleep(0.05)
            outcome["done"] = True

        receipt_client = AsyncMock(spec=ReceiptClient)
        receipt_client.send_read_receipt = AsyncMock(side_effect=slow_receipt)
        connector = make_connector([make_connection([data_frame(timestamp=1)], hold=True)])
        relay = InboundRelay(
            RelayConfig(account="+15550000001", mark_as_read=True),
            collector,
            connect=connector,
            receipt_client=receipt_client,
            sleep=make_sleep(),
        )
        stop_event = asyncio.Event()

        runner = asyncio.create_task(run_relay(relay, stop_event))
        await until(lambda: relay.pending_receipts == 1)
        stop_event.set()
        await asyncio.wait_for(runner, timeout=1)

        assert outcome["done"] is True
        assert relay.pending_receipts == 0
        assert relay.state == ConnectionState.STOPPED
