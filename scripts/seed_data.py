#!/usr/bin/env python3
"""
Seed script: creates a demo account with categories and tasks through the API.

    uvicorn todo_app.main:app &
    python scripts/seed_data.py
"""

import asyncio

from todo_app.client import ApiError, TodoApiClient

API_URL = "http://localhost:8000"
DEMO_USER = {"name": "Demo", "email": "demo@example.com", "password": "demo-password"}

CATEGORIES = [
    {"name": "Work", "color": "#EF4444"},
    {"name": "Home", "color": "#22C55E"},
    {"name": "Health", "color": "#3B82F6"},
    {"name": "Learning", "color": "#A855F7"},
]

TASKS = [
    {"title": "Prepare quarterly report", "categories": ["Work"]},
    {"title": "Reply to contractor e-mails", "categories": ["Work"], "completed": True},
    {"title": "Buy milk", "description": "2 liters", "categories": ["Home"]},
    {"title": "Fix the kitchen tap", "categories": ["Home"]},
    {"title": "Book a dentist appointment", "categories": ["Health"]},
    {"title": "Gym: legs day", "categories": ["Health"], "completed": True},
    {"title": "Read the SQLAlchemy 2.0 migration guide", "categories": ["Learning", "Work"]},
    {"title": "Water the plants", "categories": []},
]


async def sign_in(api: TodoApiClient) -> None:
    try:
        await api.sign_up(**DEMO_USER)
        print(f"  ✅ Registered {DEMO_USER['email']}")
    except ApiError as e:
        if e.code != "ALREADY_EXISTS":
            raise
        await api.sign_in(DEMO_USER["email"], DEMO_USER["password"])
        print(f"  ✅ Signed in as {DEMO_USER['email']}")


async def main():
    print("=" * 60)
    print("Seeding database with demo categories and tasks")
    print("=" * 60)

    async with TodoApiClient(API_URL) as api:
        print("\n🔑 Account...")
        await sign_in(api)

        print("\n🏷️ Creating categories...")
        category_ids = {c["name"]: c["id"] for c in await api.list_categories()}
        for data in CATEGORIES:
            if data["name"] in category_ids:
                print(f"  ⏭️ {data['name']} already exists")
                continue
            category = await api.create_category(data["name"], data["color"])
            category_ids[category["name"]] = category["id"]
            print(f"  ✅ {category['name']} (id={category['id']})")

        print("\n📋 Creating tasks...")
        total_tasks = 0
        for data in TASKS:
            todo = await api.create_todo(
                data["title"],
                data.get("description"),
                [category_ids[name] for name in data["categories"]],
            )
            if data.get("completed"):
                await api.update_todo(todo["id"], completed=True)
            total_tasks += 1
            print(f"  ✅ {todo['title'][:50]}")

    print("\n" + "=" * 60)
    print(f"✅ Done! {len(category_ids)} categories, {total_tasks} tasks")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
