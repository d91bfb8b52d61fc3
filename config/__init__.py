"""Configuration for the remotewd client."""
