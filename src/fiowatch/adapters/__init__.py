"""Adapters connecting the domain ports to Hyperion, Discord and checkpoint storage."""
