"""External-tool conversion pipelines."""
