"""In-memory fakes for exercising nav_core without a game engine."""
