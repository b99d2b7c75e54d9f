"""Application services: templating, field pipeline, serialization, config merge."""
