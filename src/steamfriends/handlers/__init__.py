"""Route handlers for steamfriends."""
