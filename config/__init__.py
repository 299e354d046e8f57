"""Configuration for the Growatt tools."""
