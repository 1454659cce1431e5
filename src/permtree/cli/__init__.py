"""Command line interface for permtree."""
