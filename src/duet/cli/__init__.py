"""Command-line interface for duet."""
