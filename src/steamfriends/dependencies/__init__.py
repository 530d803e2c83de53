"""FastAPI dependencies for steamfriends."""
