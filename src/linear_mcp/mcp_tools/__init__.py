"""Domain tool modules. Each exposes ``register(registry, client)``."""
