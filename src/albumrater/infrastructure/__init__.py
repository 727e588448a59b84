"""Infrastructure layer: integrations, persistence and observability."""
