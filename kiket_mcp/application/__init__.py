"""Application layer: operation registries and event handlers."""
