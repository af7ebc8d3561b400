"""Infrastructure: persistence, object storage and security adapters."""
