"""End-to-end smoke runner for a live clinic queue server."""
