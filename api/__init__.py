"""HTTP layer for the content registry."""
