"""Infrastructure layer: adapters, stubs, monitoring and observability."""
