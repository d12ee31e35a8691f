from expensedesk.models.receipt import ReceiptModel  # noqa: F401
from expensedesk.models.user import DepartmentModel, UserModel  # noqa: F401
