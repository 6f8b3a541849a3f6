"""Adapters binding the tierscope core to storage backends and web frameworks."""
