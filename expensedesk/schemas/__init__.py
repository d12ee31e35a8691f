from expensedesk.schemas.base import (  # noqa: F401
    ApproveRequest,
    AssistantRequest,
    AssistantResponse,
    BreakdownRow,
    DashboardCounts,
    DashboardResponse,
    Department,
    DraftItem,
    ExtractionSuggestions,
    GroupBy,
    LineItem,
    Receipt,
    ReceiptDraft,
    ReceiptStatus,
    RejectRequest,
    ReportFilter,
    ReportResponse,
    ReportSummary,
    Role,
    SubmitRequest,
    User,
)
from expensedesk.schemas.users import (  # noqa: F401
    AuthResponse,
    DepartmentCreate,
    DepartmentSummary,
    DepartmentUpdate,
    LoginRequest,
    RegisterRequest,
    UserCreate,
    UserUpdate,
)
