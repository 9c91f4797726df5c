"""Service layer coordinating persistence, caching and presentation."""
