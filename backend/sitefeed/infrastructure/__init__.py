"""Infrastructure Layer — database sessions, outbound HTTP clients, logging setup."""
