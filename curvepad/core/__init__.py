"""Core (pure) bonding-curve logic."""
