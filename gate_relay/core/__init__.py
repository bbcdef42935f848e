"""Core gate relay logic: configuration, registry, signing and dispatch."""
