"""Data access layer. Repositories take a session and never commit."""
