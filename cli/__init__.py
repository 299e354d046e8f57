"""Command line tools for exporting and monitoring Growatt power data."""
