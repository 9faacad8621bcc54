"""
Error Message Utilities

Turns raw PostgreSQL constraint errors into human-readable messages.
"""

import re
from typing import Optional

# Human-readable constraint explanations
CONSTRAINT_MESSAGES = {
    "users_email_key": "An account with this email address already exists.",
    "moods_user_id_fk": "The owning user does not exist.",
    "moods_pkey": "A mood entry with this ID already exists.",
    "users_pkey": "A user with this ID already exists.",
}


def constraint_name(error: Exception) -> Optional[str]:
    """Extract the violated constraint name from a driver error, if any."""
    name = getattr(error, "constraint_name", None)
    if name:
        return name
    match = re.search(r'constraint "(\w+)"', str(error))
    if match:
        return match.group(1)
    return None


def enhance_error_message(error: Exception) -> str:
    """
    Enhance database error messages with human-readable explanations.

    Handles:
    - Unique constraint violations
    - Foreign key violations (explains the relationship)
    - Check constraint violations
    - Not-null violations

    Returns the enhanced error message string.
    """
    error_str = str(error)

    unique_match = re.search(r'duplicate key value violates unique constraint "(\w+)"', error_str)
    if unique_match:
        name = unique_match.group(1)
        explanation = CONSTRAINT_MESSAGES.get(name, "A record with this value already exists.")
        return f"Duplicate entry ({name}): {explanation}"

    fk_match = re.search(r'violates foreign key constraint "(\w+)"', error_str)
    if fk_match:
        name = fk_match.group(1)
        explanation = CONSTRAINT_MESSAGES.get(name, "The referenced record does not exist.")
        return f"Foreign key violation ({name}): {explanation}"

    check_match = re.search(r'violates check constraint "(\w+)"', error_str)
    if check_match:
        name = check_match.group(1)
        explanation = CONSTRAINT_MESSAGES.get(name)
        if explanation:
            return f"Constraint violation ({name}): {explanation}"
        return f"Constraint violation: {name}. {error_str}"

    null_match = re.search(r'null value in column "(\w+)" .* violates not-null constraint', error_str)
    if null_match:
        column_name = null_match.group(1)
        return f"Required field missing: '{column_name}' cannot be null."

    return error_str
