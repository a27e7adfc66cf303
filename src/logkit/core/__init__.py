"""Framework-free core of the logging pipeline."""
