"""
Backfill Profiles Script
Creates the missing profile for every principal in auth.users that has none,
e.g. principals created before signup projection existed, or left behind by a
failed rollback. Safe to run repeatedly.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from app.core.access_gate import AccessGate, get_access_gate
from app.database.supabase_client import get_supabase_admin
from app.modules.profiles.service import ProfileService
from supabase import Client
from typing import Dict, Optional
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

PAGE_SIZE = 100


def backfill_profiles(admin_client: Client, gate: Optional[AccessGate] = None, page_size: int = PAGE_SIZE) -> Dict[str, int]:
    """Project a profile for each principal lacking one"""
    profiles = ProfileService(admin_client, gate or get_access_gate())
    created_count = 0
    existing_count = 0
    failed_count = 0
    page = 1

    while True:
        users = admin_client.auth.admin.list_users(page=page, per_page=page_size)
        if not users:
            break

        for user in users:
            user_id = str(user.id)
            try:
                if profiles.find_profile(user_id) is not None:
                    existing_count += 1
                    continue
                if not user.email:
                    logger.warning(f"Principal {user_id} has no email; skipping")
                    failed_count += 1
                    continue
                profiles.create_profile(user_id, user.email)
                created_count += 1
                logger.debug(f"Created profile for principal {user_id}")
            except Exception as e:
                logger.error(f"Error backfilling profile for principal {user_id}: {e}")
                failed_count += 1

        if len(users) < page_size:
            break
        page += 1

    logger.info(
        f"Profiles backfilled: {created_count} created, {existing_count} already present, {failed_count} failed"
    )
    return {"created": created_count, "existing": existing_count, "failed": failed_count}


def main():
    """Main function to backfill profiles"""
    try:
        admin_client = get_supabase_admin()

        logger.info("Starting profile backfill...")
        summary = backfill_profiles(admin_client)
        logger.info("Backfill completed")

        if summary["failed"]:
            sys.exit(1)

    except Exception as e:
        logger.error(f"Error during backfill: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
