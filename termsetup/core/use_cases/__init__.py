"""Use cases — channel-independent entry points called by the CLI."""
