"""CLI for trendfeed."""
