"""Core components: session lifecycle, file registry and their persistence ports."""
