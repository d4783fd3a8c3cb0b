"""Command-line entry points run by the external scheduler."""
