"""Run the citizen sync pipeline once from a shell.

Usage:
    CONSUMER_KEY=... CONSUMER_SECRET=... AGENT_ID=... DATABASE_URL=... \
        uv run python scripts/sync_citizen.py <appId> <mToken>

Pass --dry-run to skip the database write and print the extracted record
instead of the stored one.

This script is for local/staging E2E validation only. The mToken is a live
session credential: do not paste it into shared terminals or CI logs.
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone


def main() -> int:
    parser = argparse.ArgumentParser(description="Sync one citizen profile from the DGA gateway.")
    parser.add_argument("app_id")
    parser.add_argument("m_token")
    parser.add_argument("--dry-run", action="store_true", help="do not write to the database")
    args = parser.parse_args()

    # Import after argument parsing so --help works without the package installed
    from tangrat.domain.citizen_sync import run_citizen_sync
    from tangrat.domain.models import CitizenRecord, PersistedProfile
    from tangrat.gateway.config import GatewayConfig
    from tangrat.observability.correlation import correlation_scope

    save = None
    if args.dry_run:

        def save(citizen: CitizenRecord) -> PersistedProfile:
            now = datetime.now(timezone.utc)
            return PersistedProfile(
                id=0,
                user_id=citizen.user_id,
                citizen_id=citizen.citizen_id,
                first_name=citizen.first_name,
                middle_name=citizen.middle_name,
                last_name=citizen.last_name,
                date_of_birth=citizen.date_of_birth,
                mobile=citizen.mobile,
                email=citizen.email,
                notification_enabled=citizen.notification_enabled,
                created_at=now,
                updated_at=now,
            )

    with correlation_scope("script:sync_citizen"):
        outcome = run_citizen_sync(
            {"appId": args.app_id, "mToken": args.m_token},
            load_config=GatewayConfig.from_env,
            save=save,
        )

    print(f"HTTP status: {outcome.http_status}")
    print(json.dumps(outcome.to_dict(), indent=2, ensure_ascii=False))
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    sys.exit(main())
