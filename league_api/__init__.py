"""Flag football league backend."""
