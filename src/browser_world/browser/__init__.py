"""Browser session implementations and named providers."""
