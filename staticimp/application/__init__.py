"""Application layer: placeholder engine, field pipeline, and entry use cases."""
