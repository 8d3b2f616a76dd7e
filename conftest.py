"""Root conftest so the top-level packages import without an install."""
