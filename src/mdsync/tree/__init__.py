"""Document tree model.

Submodules:
  nodes  -- node kinds, format flags, node classes and table validation
  arena  -- DocumentTree: keyed node index and rendered-element side table
"""
