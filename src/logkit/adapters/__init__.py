"""Adapters connecting the core pipeline to sinks and frameworks."""
