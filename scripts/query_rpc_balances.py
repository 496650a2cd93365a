"""
Query ERC20 balanceOf directly over JSON-RPC for a handful of holders.

Usage:
    python scripts/query_rpc_balances.py --token 0x48b6... 0x2daf... 0x040d...
"""

import argparse
import os
import sys
import time

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import requests
from dotenv import load_dotenv

from insight_bench.extractors.rpc import RpcClient, balance_of_calldata
from insight_bench.transformers.units import wei_to_tokens

load_dotenv()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check holder balances on-chain")
    parser.add_argument("addresses", nargs="+")
    parser.add_argument("--token", required=True)
    parser.add_argument("--decimals", type=int, default=18)
    parser.add_argument("--rpc-url", default=os.getenv("RPC_URL"))
    parser.add_argument("--block", default="latest")
    parser.add_argument("--sleep-ms", type=float, default=100)
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if not args.rpc_url:
        print("Missing RPC_URL in environment (.env) or --rpc-url.")
        sys.exit(1)

    rpc = RpcClient(args.rpc_url, secret_key=os.getenv("RPC_SECRET_KEY"))
    print("🔍 Querying RPC for wallet balances...")
    print(f"📍 RPC: {args.rpc_url}")
    print(f"🪙 Token: {args.token}")

    for address in args.addresses:
        print(f"\n📍 Checking: {address}")
        print(f"📦 Data: {balance_of_calldata(address)}")
        try:
            wei = rpc.balance_of(args.token, address, block=args.block)
        except (requests.RequestException, RuntimeError, ValueError) as exc:
            print(f"❌ Failed to get balance: {exc}")
        else:
            print(f"💰 Wei balance: {wei}")
            print(f"🪙 Token balance: {wei_to_tokens(str(wei), args.decimals)}")
        time.sleep(args.sleep_ms / 1000)


if __name__ == "__main__":
    main()
