#!/usr/bin/env python3
"""Run the ping-pong strategy in paper mode against live Jupiter quotes.

Usage:
    python scripts/run_pingpong.py \
        --token-a EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v:USDC:6 \
        --token-b So11111111111111111111111111111111111111112:SOL:9 \
        --amount 10 --target-profit 1 --cycles 20 --interval-s 5

Outputs:
    orders.json - order journal (reloaded on the next run)
    Per-cycle reports on stdout, structured logs on stderr
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import uuid
from decimal import Decimal, InvalidOperation
from pathlib import Path


def parse_token(value: str) -> dict[str, object]:
    """Parse ADDRESS:SYMBOL:DECIMALS."""
    parts = value.split(":")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected ADDRESS:SYMBOL:DECIMALS, got {value!r}")
    address, symbol, decimals = parts
    try:
        return {"address": address, "symbol": symbol, "decimals": int(decimals)}
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid decimals in {value!r}") from e


def parse_decimal_arg(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"invalid decimal {value!r}") from e


async def run(args: argparse.Namespace) -> int:
    from pingpong.aggregator import JupiterConfig, JupiterQuoteClient, PaperAggregator
    from pingpong.contracts import TokenInfo
    from pingpong.errors import PingPongError
    from pingpong.store import StateStore
    from pingpong.strategy import PingPongConfig, PingPongStrategy

    config = PingPongConfig(
        tokens_info=(TokenInfo(**args.token_a), TokenInfo(**args.token_b)),
        amount=args.amount,
        slippage_bps=args.slippage_bps,
        target_profit_percent=args.target_profit,
        enable_auto_slippage=args.auto_slippage,
        enable_compounding=args.compounding,
        priority_fee_micro_lamports=args.priority_fee,
    )
    aggregator = PaperAggregator(JupiterQuoteClient(JupiterConfig(base_url=args.base_url)))
    store = StateStore.from_journal(args.journal)
    strategy = PingPongStrategy(config, aggregator=aggregator, store=store)

    try:
        try:
            await strategy.init()
        except PingPongError as e:
            print(f"ERROR: initialization failed: {e}")
            return 1

        print(
            f"Config: {config.tokens_info[0].symbol}->{config.tokens_info[1].symbol}, "
            f"amount={config.amount}, target_profit={config.target_profit_percent}%"
        )

        executed = 0
        for cycle in range(args.cycles):
            runtime_id = uuid.uuid4().hex
            report = await strategy.run(runtime_id)
            if report.profit is not None:
                executed += 1
            print(
                f"[{cycle + 1}/{args.cycles}] {report.outcome.value:8s} "
                f"order={report.order_id} reason={report.reason.value if report.reason else '-'} "
                f"price={report.live_price} expected_profit%={report.expected_profit_percent}"
                + (f" error={report.error}" if report.error else "")
            )
            if cycle + 1 < args.cycles:
                await asyncio.sleep(args.interval_s)
    finally:
        await aggregator.close()

    print("\n=== PING-PONG RESULTS ===")
    print(f"  Cycles: {args.cycles}")
    print(f"  Executed: {executed}")
    print(f"  Orders in journal: {len(store.get_state().orders)}")
    print(f"  Journal: {args.journal}")
    return 0


def main() -> int:
    """Run the paper-trading loop."""
    parser = argparse.ArgumentParser(description="Run ping-pong strategy (paper mode)")
    parser.add_argument("--token-a", type=parse_token, required=True, help="ADDRESS:SYMBOL:DECIMALS")
    parser.add_argument("--token-b", type=parse_token, required=True, help="ADDRESS:SYMBOL:DECIMALS")
    parser.add_argument(
        "--amount",
        type=parse_decimal_arg,
        required=True,
        help="Trade amount in token A (human units)",
    )
    parser.add_argument("--slippage-bps", type=int, default=50, help="Slippage (default: 50)")
    parser.add_argument(
        "--target-profit",
        type=parse_decimal_arg,
        default=Decimal("1"),
        help="Target profit percent per trade (default: 1)",
    )
    parser.add_argument("--auto-slippage", action="store_true", help="Enable auto slippage")
    parser.add_argument("--compounding", action="store_true", help="Enable compounding")
    parser.add_argument("--priority-fee", type=int, default=None, help="Priority fee (micro lamports)")
    parser.add_argument("--cycles", type=int, default=10, help="Number of cycles (default: 10)")
    parser.add_argument(
        "--interval-s",
        type=float,
        default=5.0,
        help="Seconds between cycles (default: 5)",
    )
    parser.add_argument(
        "--journal",
        type=Path,
        default=Path("orders.json"),
        help="Order journal path (default: orders.json)",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default="https://lite-api.jup.ag/swap/v1",
        help="Quote API base URL",
    )
    parser.add_argument("--log-json", action="store_true", help="JSON logs (default: human-readable)")
    parser.add_argument("--log-level", type=str, default="INFO", help="Log level (default: INFO)")

    args = parser.parse_args()

    if args.cycles < 1:
        print("ERROR: --cycles must be >= 1")
        return 1

    from pingpong.logging_config import setup_logging

    setup_logging(level=args.log_level.upper(), json_format=args.log_json)

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
