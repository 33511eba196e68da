"""
Persistence functions, one module per table.

Each function takes the request's AsyncSession as its first argument. None of
them commit: the session (and therefore the database transaction) belongs to
the caller, which is what lets a transfer group several writes into one unit.
"""
