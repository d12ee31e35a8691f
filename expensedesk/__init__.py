"""ExpenseDesk — receipt submission, approval and reporting."""
