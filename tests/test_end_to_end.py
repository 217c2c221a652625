"""
End-to-end scan of one block window: events in, printed report out.

The first test wires the crawler to in-memory fakes; the second runs the
same scenario through Web3PairClient with web3 mocked at the RPC boundary.
"""

from unittest.mock import MagicMock

import pytest

from sandwich_scan.adapters.v2 import Web3PairClient
from sandwich_scan.crawler import BlockWindowCrawler
from sandwich_scan.report import format_window
from sandwich_scan.revenue import RevenueEngine
from sandwich_scan.types import TransactionGas

BLOCK = 15_000_000


@pytest.fixture
def scenario(make_swap):
    """Frontrun at 10 spends 1 WETH, backrun at 12 returns exactly 1 WETH."""
    return [
        make_swap(10, block=BLOCK, in0=10**18),
        make_swap(11, block=BLOCK, in1=3_000 * 10**6, out0=2 * 10**18),
        make_swap(12, block=BLOCK, out0=10**18),
        # Busy neighbouring block without a sandwich
        make_swap(0, block=BLOCK - 1, in0=10**18, out1=10**6),
        make_swap(1, block=BLOCK - 1, in1=10**6, out0=10**17),
        make_swap(2, block=BLOCK - 1, in0=5 * 10**18),
    ]


@pytest.mark.asyncio
async def test_single_sandwich_with_fakes(
    pair, scenario, fake_event_source, fake_tx_source
):
    front, _, back = scenario[:3]
    tx_source = fake_tx_source(
        {
            front.tx_hash: TransactionGas(front.tx_hash, 30 * 10**9, 120_000),
            back.tx_hash: TransactionGas(back.tx_hash, 30 * 10**9, 100_000),
        }
    )
    crawler = BlockWindowCrawler(
        pair=pair,
        event_source=fake_event_source(scenario),
        revenue_engine=RevenueEngine(tx_source),
        start_block=BLOCK,
    )

    result = await crawler.run_one_window()

    assert result.total_swaps == 6
    assert result.qualifying_blocks == 2
    assert result.sandwich_count == 1

    report = result.reports[0]
    assert report.sandwich.frontrun is front
    assert report.sandwich.lunchmeat is scenario[1]
    assert report.sandwich.backrun is back
    assert report.profit0 == 0.0
    assert report.profit1 == 0.0
    assert report.gas.total == pytest.approx(0.0066)

    text = format_window(result, pair, color=False)
    assert f" Block {BLOCK} " in text
    assert " +0.0 WETH" in text
    assert "ETH (gas)" in text


def _decoded(swap):
    return {
        "args": {
            "amount0In": swap.amount0_in,
            "amount1In": swap.amount1_in,
            "amount0Out": swap.amount0_out,
            "amount1Out": swap.amount1_out,
        },
        "blockNumber": swap.block_number,
        "transactionHash": swap.tx_hash,
        "transactionIndex": swap.tx_index,
    }


@pytest.mark.asyncio
async def test_single_sandwich_through_web3_client(pair, scenario):
    web3 = MagicMock()
    web3.eth.get_logs.return_value = [object() for _ in scenario]
    process_log = web3.eth.contract.return_value.events.Swap.return_value.process_log
    process_log.side_effect = [_decoded(s) for s in scenario]
    web3.eth.get_transaction.return_value = {"gasPrice": 20 * 10**9}
    web3.eth.get_transaction_receipt.return_value = {"gasUsed": 100_000}

    client = Web3PairClient(web3, backoff_sec=0)
    crawler = BlockWindowCrawler(
        pair=pair,
        event_source=client,
        revenue_engine=RevenueEngine(client),
        start_block=BLOCK,
    )

    result = await crawler.run_one_window()

    assert result.sandwich_count == 1
    legs = result.reports[0].sandwich.legs
    assert [s.tx_index for s in legs] == [10, 11, 12]
    assert result.reports[0].profit0 == 0.0
    assert result.reports[0].gas.total == pytest.approx(0.004)

    fetched = [c.args[0] for c in web3.eth.get_transaction.call_args_list]
    assert sorted(fetched) == sorted([legs[0].tx_hash, legs[2].tx_hash])
