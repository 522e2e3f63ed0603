"""Scripts package for the Fabric cost toolkit."""
