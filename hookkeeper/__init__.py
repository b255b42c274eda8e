"""hookkeeper: GitHub webhook configuration manager for a build server."""
