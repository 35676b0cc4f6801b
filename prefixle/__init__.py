"""Daily prefix word puzzle: validation, scoring and progress tracking."""
