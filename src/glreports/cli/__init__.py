"""CLI layer for glreports."""
