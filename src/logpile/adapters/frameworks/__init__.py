"""Framework adapters exposing session snapshots."""
