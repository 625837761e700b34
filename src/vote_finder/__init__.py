"""Vote Finder: locate polling places and early voting sites for a location."""
