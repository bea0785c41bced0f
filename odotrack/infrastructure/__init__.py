"""Infrastructure adapters - distance math and durable storage."""
