"""HTTPS transport for the webhook."""
