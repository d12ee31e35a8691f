from expensedesk.store.base import EntityStore, derive_members, new_id  # noqa: F401
from expensedesk.store.memory import InMemoryStore  # noqa: F401
from expensedesk.store.seed import seed_demo_data  # noqa: F401
from expensedesk.store.sql import SqlStore  # noqa: F401
