"""Storage layers for the record store and the Steam Web API."""
