#!/usr/bin/env python3
"""
Load a medicine inventory into a running Clinic Desk server.

The server keeps everything in memory, so this talks to its API rather
than to a database.

Usage:
    python seed_medicines_inventory.py medicines.csv
    python seed_medicines_inventory.py medicines.json --url http://127.0.0.1:8000
"""

import argparse
import json
import sys
from pathlib import Path

import requests

DEFAULT_URL = "http://127.0.0.1:8000"


def load_rows(path: Path) -> list:
    """Read rows from a JSON file: a list, or {"medicines": [...]}."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    rows = data.get("medicines", []) if isinstance(data, dict) else data
    return [
        {
            "name": row.get("name") or row.get("item_name"),
            "price": str(row.get("price", 0)),
            "stockQuantity": int(row.get("stockQuantity", row.get("quantity", 0))),
            "description": row.get("description") or row.get("disease") or "",
        }
        for row in rows
    ]


def seed_medicines(path: Path, base_url: str) -> bool:
    if not path.exists():
        print(f"Error: {path} not found!")
        return False

    if path.suffix.lower() == ".csv":
        with open(path, "rb") as f:
            resp = requests.post(
                f"{base_url}/api/medicines/import",
                files={"file": (path.name, f, "text/csv")},
                timeout=30,
            )
    else:
        resp = requests.post(f"{base_url}/api/medicines/bulk", json=load_rows(path), timeout=30)

    if resp.status_code != 201:
        print(f"Seeding failed ({resp.status_code}): {resp.text}")
        return False

    created = resp.json()
    for med in created:
        print(f"✓ Added: {med['name']} (Qty: {med['stockQuantity']}, Price: ₹{med['price']})")
    print(f"\n✅ Successfully seeded {len(created)} medicines!")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed medicines into a running Clinic Desk server")
    parser.add_argument("file", type=Path, help="CSV (name,price,stockQuantity,description) or JSON file")
    parser.add_argument("--url", default=DEFAULT_URL, help="Server base URL")
    args = parser.parse_args()
    print("🏥 Clinic Desk - Medicine Inventory Seeding\n")
    sys.exit(0 if seed_medicines(args.file, args.url) else 1)
