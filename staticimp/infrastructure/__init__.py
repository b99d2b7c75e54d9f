"""Infrastructure: backend drivers, secret vault, and config loading."""
