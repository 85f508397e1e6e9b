"""Service layer for business logic.

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Repositories (Database)

Services should:
- Build entities through domain factories and mutators
- Orchestrate calls to repositories
- Raise tagged errors from ``core.errors``
- Audit every successful create/update/delete

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details
- Inspect error message text
"""
