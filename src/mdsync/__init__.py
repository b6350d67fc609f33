"""Markdown <-> document tree synchronization for a dual-view editor.

Subpackages:
  tree     -- document node model and the keyed node arena
  tables   -- inline run parser, GFM table codec, geometry and edit coordination
  sync     -- block-level transformer and the per-view content sync controller
  editing  -- raw-text keystroke helpers (bracket auto-pairing)
"""
