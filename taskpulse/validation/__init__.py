"""Task business rules (date ordering, assignee capacity)."""
