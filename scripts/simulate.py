"""
Event Storm Simulation Script

Drives the mock order server with concurrent staff actions while several
staff screens follow along through their own push channels, then checks
that every screen converged on the server's truth.
Run from project root: python scripts/simulate.py

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import sys
import os
import random
import time
import argparse
from datetime import datetime
from typing import Any

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from orderdesk.core.config import setup_logging
from orderdesk.schemas import OrderStatus
from orderdesk.services.api.mock import MockOrderApi
from orderdesk.services.board import OrderBoard
from orderdesk.services.channel.mock import MockEventSource

# Configuration
TOTAL_ORDERS = 50
SCREENS = 3

FIRST_NAMES = ["Asha", "Ravi", "Meera", "Arjun", "Kavya", "Rohan", "Isha", "Vikram", "Priya", "Dev"]
MENU_ITEMS = [
    {"id": 1, "name": "Masala Dosa", "price": 80},
    {"id": 2, "name": "Idli Sambar", "price": 50},
    {"id": 3, "name": "Paneer Tikka", "price": 180.5},
    {"id": 4, "name": "Veg Biryani", "price": 160},
    {"id": 5, "name": "Filter Coffee", "price": 25.25},
    {"id": 6, "name": "Gulab Jamun", "price": 40},
]


def generate_random_items() -> list[dict[str, Any]]:
    """Generate random order lines."""
    items = []
    for menu_item in random.sample(MENU_ITEMS, random.randint(1, 4)):
        item = dict(menu_item)
        item["quantity"] = random.randint(1, 3)
        items.append(item)
    return items


async def staff_activity(api: MockOrderApi, total_orders: int) -> dict[str, int]:
    """Create orders and randomly complete or delete some of them."""
    stats = {"created": 0, "completed": 0, "deleted": 0, "failed": 0}
    created_ids: list[int] = []

    async def create_one(n: int) -> None:
        items = generate_random_items()
        total = sum(i["price"] * i["quantity"] for i in items)
        result = await api.create_order({
            "customer_name": f"{random.choice(FIRST_NAMES)} #{n}",
            "items": items,
            "total_amount": round(total, 2),
            "payment_method": random.choice(["Cash", "UPI"]),
        })
        if result.success:
            stats["created"] += 1
            created_ids.append(result.data["id"])
        else:
            stats["failed"] += 1

    await asyncio.gather(*(create_one(n) for n in range(total_orders)))

    async def touch(order_id: int) -> None:
        roll = random.random()
        if roll < 0.4:
            result = await api.update_order_status(order_id, OrderStatus.COMPLETED)
            key = "completed"
        elif roll < 0.6:
            result = await api.delete_order(order_id)
            key = "deleted"
        else:
            return
        stats[key if result.success else "failed"] += 1

    await asyncio.gather(*(touch(order_id) for order_id in created_ids))
    return stats


def board_matches(board: OrderBoard, truth: list[dict[str, Any]]) -> bool:
    ours = {o.id: (o.status.value, len(o.items)) for o in board.orders}
    theirs = {o["id"]: (o["status"], len(o["items"])) for o in truth}
    return ours == theirs


def conservation_holds(board: OrderBoard) -> bool:
    aggregated = sum(item.quantity for item in board.aggregated)
    lines = sum(line.quantity for order in board.orders for line in order.items)
    return aggregated == lines


async def run_simulation(total_orders: int, screens: int, failure_rate: float) -> bool:
    """Run the storm and report whether every screen converged."""
    print("=" * 60)
    print("🌪️  EVENT STORM SIMULATION")
    print("=" * 60)
    print(f"⏰ Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"📦 Orders: {total_orders}   🖥️  Screens: {screens}   💥 Failure rate: {failure_rate:.0%}")
    print("=" * 60)

    api = MockOrderApi(failure_rate=failure_rate, min_latency=0.0, max_latency=0.02)
    boards = []
    listeners = []

    for _ in range(screens):
        source = MockEventSource()
        api.subscribe(source)
        board = OrderBoard(api)
        boards.append((board, source))

    start_time = time.time()
    activity = asyncio.create_task(staff_activity(api, total_orders))

    # Screens mount at different moments, racing their snapshot against the stream
    for board, source in boards:
        await asyncio.sleep(random.uniform(0.0, 0.05))
        while not (await board.mount()).success:
            await asyncio.sleep(0.01)
        listeners.append(asyncio.create_task(board.listen(source)))

    stats = await activity
    for _, source in boards:
        await source.drain(timeout=5.0)
        await source.close()
    await asyncio.gather(*listeners)
    elapsed = round(time.time() - start_time, 3)

    api.failure_rate = 0.0
    truth = (await api.fetch_orders()).data

    print(f"\n📊 ACTIVITY ({elapsed}s):")
    for key, value in stats.items():
        print(f"   {key.capitalize():<10} {value}")

    print(f"\n🔍 CONVERGENCE:")
    all_ok = True
    for n, (board, source) in enumerate(boards, start=1):
        matches = board_matches(board, truth)
        conserved = conservation_holds(board)
        all_ok = all_ok and matches and conserved
        mark = "✅" if matches and conserved else "❌"
        print(
            f"   {mark} Screen {n}: {len(board.orders)} orders, "
            f"{source.delivered} events, matches server={matches}, conservation={conserved}"
        )

    print("\n" + "=" * 60)
    print("✅ ALL SCREENS CONSISTENT" if all_ok else "❌ SCREENS DIVERGED")
    print("=" * 60)
    return all_ok


def main() -> None:
    parser = argparse.ArgumentParser(description="Event storm simulation for staff boards")
    parser.add_argument("--orders", type=int, default=TOTAL_ORDERS, help="Orders to create")
    parser.add_argument("--screens", type=int, default=SCREENS, help="Staff screens following the stream")
    parser.add_argument("--failure-rate", type=float, default=0.1, help="Simulated API failure rate")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a repeatable run")
    args = parser.parse_args()

    if args.seed is not None:
        random.seed(args.seed)

    setup_logging()
    ok = asyncio.run(run_simulation(args.orders, args.screens, args.failure_rate))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
