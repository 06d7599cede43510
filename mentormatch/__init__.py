"""
MentorMatch: tiered mentor recommendation and case generation.

Pipeline:

1. **mentors** – load the mentor pool from a JSON file into an immutable
   snapshot.
2. **selector** – pick five mentors for a (direction, role) request: exact
   rule matches first, then relevance-oracle ranking, then a deterministic
   backfill.
3. **cases** – render the narrative case prompt for a chosen mentor and
   generate the document through the text-generation client.
4. **archive** – persist generated cases in SQLite.
5. **app** – command line entry point wiring the above together.
"""

__version__ = "0.1.0"
