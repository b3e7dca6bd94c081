"""Custom field definitions and typed value validation."""
