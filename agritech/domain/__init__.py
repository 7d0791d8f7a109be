"""Domain rules and exceptions, free of HTTP and persistence concerns."""
