"""Application services: account use-cases orchestrated over units of work."""
