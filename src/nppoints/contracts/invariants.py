"""Formal reader invariants.

This file documents what each stage MUST produce. It is a reviewer anchor
and system reference, not executable checks.
"""

READER_INVARIANTS = {
    "load": [
        "Top-level object is a numpy ndarray",
        "Array dtype is structured (named fields)",
        "Backing storage is held until the session releases the handle",
    ],

    "schema": [
        "Array rank is exactly 1 (flat named columns)",
        "Array has at least one row",
        "Field order equals on-disk declaration order",
        "Every field maps to exactly one TypeTag",
        "No two fields share a canonical dimension",
    ],

    "iteration": [
        "Blocks are zero-copy views of at most block_size rows",
        "Exactly one advance per field per row, in field order",
        "Handle is acquired once and released once",
    ],

    "streaming": [
        "next_record returns True exactly total_count times, then False",
        "Row position is monotonic within [0, total_count]",
        "close() is idempotent and valid from any state",
    ],
}

# Stages that must succeed before a record can be produced
STAGE_REQUIREMENTS = {
    "load": "REQUIRED",
    "schema": "REQUIRED",
    "iteration": "REQUIRED",
    "streaming": "OPTIONAL",  # a caller may close right after reading the schema
}
