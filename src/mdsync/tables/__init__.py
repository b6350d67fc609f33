"""GFM table support for the structured view.

Submodules:
  patterns  -- compiled regex patterns shared by the table code
  inline    -- inline run parser for cell text and run-to-markdown wrapping
  codec     -- parse_table / serialize_table between markdown and TableNode
  schema    -- TableMatrix Pydantic model (plain cell-text grid)
  geometry  -- row/column insert and delete on an already-located table
  edits     -- gesture/cursor resolution and structural table edits
"""
