"""Core building blocks: failure taxonomy and value objects."""
