#!/usr/bin/env python3
"""
Initialize Database
===================

Creates all tables and inserts the sample feedback records. Records whose
id already exists are left untouched, so the script can be re-run.

Usage:
    DATABASE_URL=mysql+aiomysql://root@localhost:3306/feedback_db python scripts/init_database.py

    # drop and recreate every table first
    python scripts/init_database.py --reset
"""

import argparse
import asyncio

from feedback_triage.feedback.application import FeedbackCreateRequest, build_feedback_record
from feedback_triage.feedback.infrastructure import SQLAlchemyFeedbackRepository
from feedback_triage.infrastructure.database import (
    close_database,
    create_tables,
    drop_tables,
    get_session_context,
    init_database,
)

SAMPLE_FEEDBACK = [
    {
        "id": "fb_001",
        "customer_name": "Ahmad Rahman",
        "service_type": "ATM",
        "review_text": "The ATM was out of order for 3 days. Very inconvenient.",
        "review_rating": 2,
        "status": "new",
        "issue_location": "Kuala Lumpur",
    },
    {
        "id": "fb_002",
        "customer_name": "Siti Aminah",
        "service_type": "OnlineBanking",
        "review_text": "Online banking is very user-friendly and fast. Love it!",
        "review_rating": 5,
        "status": "resolved",
        "issue_location": "Selangor",
    },
    {
        "id": "fb_003",
        "customer_name": "Lim Wei Ming",
        "service_type": "CoreBanking",
        "review_text": "Staff at the branch were very helpful with my loan application.",
        "review_rating": 4,
        "status": "resolved",
        "issue_location": "Penang",
    },
    {
        "id": "fb_004",
        "customer_name": "Raj Kumar",
        "service_type": "ATM",
        "review_text": "ATM interface is confusing and slow.",
        "review_rating": 2,
        "status": "in_progress",
        "issue_location": "Johor Bahru",
    },
    {
        "id": "fb_005",
        "customer_name": "Fatimah Hassan",
        "service_type": "OnlineBanking",
        "review_text": "Great mobile app features. Easy to transfer money.",
        "review_rating": 5,
        "status": "resolved",
        "issue_location": "Melaka",
    },
]


async def main(reset: bool = False):
    """Create tables and insert sample data."""
    init_database()

    if reset:
        print("Dropping tables...")
        await drop_tables()

    print("Creating tables...")
    await create_tables()

    inserted = 0
    async with get_session_context() as session:
        repository = SQLAlchemyFeedbackRepository(session)
        for item in SAMPLE_FEEDBACK:
            if await repository.get_by_id(item["id"]) is not None:
                print(f"  {item['id']} already exists, skipping")
                continue
            request = FeedbackCreateRequest(**item)
            await repository.create(build_feedback_record(request))
            inserted += 1

    print(f"Inserted {inserted} sample feedback records")
    await close_database()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create tables and insert sample feedback")
    parser.add_argument("--reset", action="store_true", help="drop all tables first")
    args = parser.parse_args()
    asyncio.run(main(reset=args.reset))
