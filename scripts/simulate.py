"""
Concurrency Simulation Script

Registers many customers at once, each with its own cookie jar, and has
them place orders concurrently against a running server. Every returned
total is checked against the menu prices, and every order must come back
from GET /api/orders with all of its lines.

Run from project root (server running, menu seeded):
    python scripts/simulate.py --customers 20 --orders 3

Author: Your Name
Version: 1.0.0
"""

import argparse
import asyncio
import random
import sys
import time
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any

import httpx

API_BASE_URL = "http://localhost:3000"
TOTAL_CUSTOMERS = 20
ORDERS_PER_CUSTOMER = 3


def generate_lines(menu: list[dict]) -> list[dict]:
    """Pick 1-4 random menu items with random quantities."""
    picks = random.sample(menu, k=min(len(menu), random.randint(1, 4)))
    return [
        {"menuItemId": item["id"], "quantity": random.randint(1, 3)}
        for item in picks
    ]


def expected_total(menu: list[dict], lines: list[dict]) -> Decimal:
    prices = {item["id"]: Decimal(item["price"]) for item in menu}
    return sum(
        (prices[line["menuItemId"]] * line["quantity"] for line in lines),
        Decimal("0.00"),
    )


# =============================================================================
# CUSTOMER SIMULATION
# =============================================================================

async def simulate_customer(
    base_url: str,
    customer_num: int,
    num_orders: int,
    menu: list[dict],
) -> dict[str, Any]:
    """Register one customer and place ``num_orders`` orders."""
    username = f"sim_{uuid.uuid4().hex[:12]}"
    start_time = time.time()
    placed = []

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        try:
            response = await client.post(
                "/api/auth/register",
                json={"username": username, "password": "simulation-pass"},
            )
            if response.status_code != 201:
                return {
                    "customer_num": customer_num,
                    "success": False,
                    "error": f"register: {response.text[:100]}",
                    "time": round(time.time() - start_time, 3),
                }

            for _ in range(num_orders):
                lines = generate_lines(menu)
                response = await client.post("/api/orders", json={"lines": lines})
                if response.status_code != 201:
                    raise RuntimeError(f"order: {response.text[:100]}")
                order = response.json()
                if Decimal(order["total"]) != expected_total(menu, lines):
                    raise RuntimeError(
                        f"order #{order['id']} total {order['total']} "
                        f"!= {expected_total(menu, lines)}"
                    )
                placed.append((order["id"], len(lines), Decimal(order["total"])))

            response = await client.get("/api/orders")
            listed = {o["id"]: len(o["lines"]) for o in response.json()}
            for order_id, line_count, _ in placed:
                if listed.get(order_id) != line_count:
                    raise RuntimeError(f"order #{order_id} missing or partial in listing")

        except (httpx.HTTPError, RuntimeError) as e:
            return {
                "customer_num": customer_num,
                "success": False,
                "error": str(e)[:100],
                "time": round(time.time() - start_time, 3),
            }

    return {
        "customer_num": customer_num,
        "success": True,
        "orders": len(placed),
        "revenue": sum((total for _, _, total in placed), Decimal("0.00")),
        "time": round(time.time() - start_time, 3),
    }


# =============================================================================
# MAIN SIMULATION RUNNER
# =============================================================================

async def run_simulation(
    base_url: str = API_BASE_URL,
    num_customers: int = TOTAL_CUSTOMERS,
    num_orders: int = ORDERS_PER_CUSTOMER,
) -> dict[str, Any]:
    print("=" * 70)
    print("🔥 CONCURRENCY SIMULATION")
    print("=" * 70)
    print(f"👥 Customers: {num_customers} x {num_orders} orders")
    print(f"🎯 Target: {base_url}")
    print(f"⏰ Started: {datetime.now().strftime('%H:%M:%S')}")
    print("=" * 70)

    async with httpx.AsyncClient(base_url=base_url) as client:
        menu = (await client.get("/api/menu")).json()
    if not menu:
        print("\n❌ Menu is empty. Seed it first: python -m bistro seed-menu scripts/menu.sample.json")
        return {"total": num_customers, "successful": 0, "failed": num_customers}

    start_time = time.time()
    tasks = [
        simulate_customer(base_url, i + 1, num_orders, menu)
        for i in range(num_customers)
    ]
    results = await asyncio.gather(*tasks)
    total_time = round(time.time() - start_time, 2)

    successful = [r for r in results if r["success"]]
    failed = [r for r in results if not r["success"]]

    print("\n" + "=" * 70)
    print("📊 SIMULATION RESULTS")
    print("=" * 70)
    print(f"\n✅ Successful Customers: {len(successful)}/{num_customers}")
    print(f"❌ Failed Customers: {len(failed)}/{num_customers}")
    print(f"⏱️  Total Time: {total_time}s")

    if successful:
        avg_time = round(sum(r["time"] for r in successful) / len(successful), 3)
        revenue = sum((r["revenue"] for r in successful), Decimal("0.00"))
        print(f"\n📈 Average customer session: {avg_time}s")
        print(f"   💰 Total Revenue: ${revenue:.2f}")

    if failed:
        print(f"\n⚠️  Failures (showing first 5):")
        for f in failed[:5]:
            print(f"   Customer #{f['customer_num']}: {f.get('error', 'Unknown error')}")

    print("=" * 70)
    return {
        "total": num_customers,
        "successful": len(successful),
        "failed": len(failed),
        "total_time": total_time,
    }


async def test_single_flows(base_url: str = API_BASE_URL) -> bool:
    """Check the basic contract before the concurrent run."""
    print("\n" + "=" * 70)
    print("🧪 TESTING INDIVIDUAL FLOWS")
    print("=" * 70)

    async with httpx.AsyncClient(base_url=base_url) as client:
        print("\n1️⃣ Health Check...")
        response = await client.get("/health")
        if response.status_code != 200:
            print(f"   ❌ Failed: {response.text}")
            return False
        print(f"   ✅ Status: {response.json().get('status')}")

        print("\n2️⃣ Anonymous order is rejected...")
        response = await client.post(
            "/api/orders", json={"lines": [{"menuItemId": 1, "quantity": 1}]}
        )
        print(f"   {'✅' if response.status_code == 401 else '❌'} {response.status_code}")
        if response.status_code != 401:
            return False

        print("\n3️⃣ Unknown menu item is a 404...")
        await client.post(
            "/api/auth/register",
            json={"username": f"sim_{uuid.uuid4().hex[:12]}", "password": "simulation-pass"},
        )
        response = await client.post(
            "/api/orders", json={"lines": [{"menuItemId": 999999, "quantity": 1}]}
        )
        print(f"   {'✅' if response.status_code == 404 else '❌'} {response.status_code}")
        if response.status_code != 404:
            return False

    print("\n" + "=" * 70)
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrency Simulation Script")
    parser.add_argument("--base-url", default=API_BASE_URL, help="Server base URL")
    parser.add_argument("--customers", type=int, default=TOTAL_CUSTOMERS, help="Concurrent customers")
    parser.add_argument("--orders", type=int, default=ORDERS_PER_CUSTOMER, help="Orders per customer")
    parser.add_argument("--skip-tests", action="store_true", help="Skip individual tests")
    args = parser.parse_args()

    if not args.skip_tests:
        if not asyncio.run(test_single_flows(args.base_url)):
            print("\n❌ Pre-flight tests failed. Fix issues before running simulation.")
            sys.exit(1)
        print("\n✅ Pre-flight tests passed!")

    summary = asyncio.run(run_simulation(args.base_url, args.customers, args.orders))
    sys.exit(0 if summary["failed"] == 0 else 1)
