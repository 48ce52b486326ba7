"""HTTP access to the task / metrics service."""
