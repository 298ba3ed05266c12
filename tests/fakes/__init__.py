"""Test fakes: proto builders and an in-memory revision source (no disk, no database)."""
