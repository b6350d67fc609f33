"""Canonical markdown <-> document tree synchronization.

Submodules:
  blocks      -- BlockTransformer: markdown-it-py based conversion for non-table blocks
  controller  -- ViewSyncController: one-shot per-view initialization and change serialization
"""
