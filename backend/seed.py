"""Demo account seeding for development stores.

Run ``python -m backend.seed`` against the configured store, or set
``SEED_DEMO_DATA=1`` to seed the in-process store when the API starts.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from backend.auth.context import RequestContext
from backend.factory import BackendServices, build_backend_services
from shared.models import UserRecord


logger = logging.getLogger(__name__)

DEMO_NAME = "Demo User"
DEMO_EMAIL = "user@financy.com"
DEMO_PASSWORD = "user123"

DEMO_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("Food", "#EA580C"),
    ("Transport", "#2563EB"),
    ("Salary", "#16A34A"),
)

# (title, amount, type, category name)
DEMO_TRANSACTIONS: tuple[tuple[str, str, str, str], ...] = (
    ("Monthly salary", "5000", "income", "Salary"),
    ("Groceries", "350", "expense", "Food"),
    ("Ride", "45", "expense", "Transport"),
)


def seed_demo_data(services: BackendServices, *, now: datetime | None = None) -> UserRecord | None:
    """Create the demo user with sample categories and transactions.

    Returns the created user, or None when the demo email is already taken.
    """

    if services.users_repository.get_user_by_email(DEMO_EMAIL) is not None:
        logger.info("demo_seed_skipped reason=user_exists email=%s", DEMO_EMAIL)
        return None

    operations = services.operations
    auth = operations.register({"name": DEMO_NAME, "email": DEMO_EMAIL, "password": DEMO_PASSWORD})
    context = RequestContext(user_id=auth.user.id)

    category_ids = {
        name: operations.create_category(context, {"name": name, "color": color}).id
        for name, color in DEMO_CATEGORIES
    }

    moment = (now or datetime.now(timezone.utc)).isoformat()
    for title, amount, kind, category_name in DEMO_TRANSACTIONS:
        operations.create_transaction(
            context,
            {
                "title": title,
                "amount": amount,
                "type": kind,
                "date": moment,
                "category_id": str(category_ids[category_name]),
            },
        )

    logger.info(
        "demo_seed_created user_id=%s categories=%s transactions=%s",
        auth.user.id,
        len(DEMO_CATEGORIES),
        len(DEMO_TRANSACTIONS),
    )
    return services.users_repository.get_user(auth.user.id)


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    seed_demo_data(build_backend_services())


if __name__ == "__main__":
    main()
