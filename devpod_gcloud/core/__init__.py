"""Core package: configuration, authentication, compute client, exceptions."""
