"""Keystroke helpers for the raw-text view.

Submodules:
  brackets  -- auto-pairing of [ ] and ( ) for markdown link syntax
"""
