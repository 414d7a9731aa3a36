from __future__ import annotations

# Sent verbatim; the chapter parser relies on the "1." list shape it asks for.
CHAPTERS_PLAN_PROMPT = """Generate a lists all chapters of the book, including only the number and name of each chapter. The format should precisely follow these specifications:
1. [Name]
2. [Name]
// Continue with additional chapters as necessary

Ensure that every chapter of the book is represented, with the exact name as it appears in the book.
"""

CHAPTERS_RUN_INSTRUCTIONS = "Generate a list of chapters from the book."
