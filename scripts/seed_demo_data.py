#!/usr/bin/env python3
"""
Seed demo accounts for local development.

Creates one contributor and one reviewer so the submission workflow can be
exercised right away. Existing accounts are left untouched.

Usage:
    python scripts/seed_demo_data.py
    python scripts/seed_demo_data.py --env development --password 'S3cret-pass!'
"""

import argparse
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from submission_review import create_app
from submission_review.models import db
from submission_review.services.repository import SubmissionRepository
from submission_review.services.user_service import DEMO_PASSWORD, DEMO_USERS, seed_demo_users


def main():
    parser = argparse.ArgumentParser(description="Seed demo contributor and reviewer accounts")
    parser.add_argument("--env", default="development", help="App environment")
    parser.add_argument("--password", default=DEMO_PASSWORD, help="Password for the demo accounts")
    args = parser.parse_args()

    os.environ.setdefault("APP_ENV", args.env)
    app = create_app(args.env)

    with app.app_context():
        print("=" * 60)
        print("  SEED: Demo Contributor & Reviewer")
        print("=" * 60)

        created = seed_demo_users(SubmissionRepository(db.session), password=args.password)

        print(f"\n👥 {len(created)} new user(s), {len(DEMO_USERS) - len(created)} already present")
        for user in created:
            print(f"   ✅ {user.email:<28s} role={user.role}")

        print("\n" + "=" * 60)
        print(f"  Login with any demo account using password: {args.password}")
        print("=" * 60)


if __name__ == "__main__":
    main()
