"""Identity services: username claims and the backing identity provider."""
