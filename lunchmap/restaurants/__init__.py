"""
Restaurant and review domain.

Responsibilities:
- Validate and apply restaurant/review creation and deletion within a team.
- Enforce that only the creator or author may delete a record.
- Summarize reviews into overall and per-department ratings.
"""
