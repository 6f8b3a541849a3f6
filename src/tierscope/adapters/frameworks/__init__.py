"""Web framework adapters for tierscope."""
