"""Shared configuration for the mdsync editor core.

Values are read once from the environment (after loading ``ROOT/.env``) and
packaged into an ``EditorSettings`` object that callers pass explicitly into
the sync controller and the table edit coordinator.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

ROOT = Path(__file__).parent.parent.parent.resolve()
load_dotenv(ROOT / ".env")

# Sentinel substituted for each table region before the block transformer runs.
# An HTML comment so that markdown-it emits it as its own html_block.
DEFAULT_PLACEHOLDER = "<!--TABLE_PLACEHOLDER-->"

# Size of a table created by "insert table" (header row included in the rows)
DEFAULT_TABLE_ROWS = 3
DEFAULT_TABLE_COLUMNS = 3

_TRUE_VALUES = ("1", "true", "yes", "on")


class EditorSettings(BaseModel):
    """Tunable behaviour of the editor core."""

    placeholder: str = Field(default=DEFAULT_PLACEHOLDER, min_length=1)
    table_rows: int = Field(default=DEFAULT_TABLE_ROWS, ge=1)
    table_columns: int = Field(default=DEFAULT_TABLE_COLUMNS, ge=1)
    # Raise on placeholder/region count mismatch instead of logging it
    strict_placeholders: bool = True

    @classmethod
    def from_env(cls) -> "EditorSettings":
        """Build settings from ``MDSYNC_*`` environment variables, falling back to defaults."""
        strict = os.getenv("MDSYNC_STRICT_PLACEHOLDERS", "true").strip().lower() in _TRUE_VALUES
        return cls(
            placeholder=os.getenv("MDSYNC_PLACEHOLDER", DEFAULT_PLACEHOLDER),
            table_rows=int(os.getenv("MDSYNC_TABLE_ROWS", str(DEFAULT_TABLE_ROWS))),
            table_columns=int(os.getenv("MDSYNC_TABLE_COLUMNS", str(DEFAULT_TABLE_COLUMNS))),
            strict_placeholders=strict,
        )
