"""Service layer: money helpers and content API clients."""
