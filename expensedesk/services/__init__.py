from expensedesk.services.directory import Directory  # noqa: F401
from expensedesk.services.lifecycle import ReceiptLifecycle  # noqa: F401
