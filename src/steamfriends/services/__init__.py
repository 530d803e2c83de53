"""Service layer for steamfriends."""
