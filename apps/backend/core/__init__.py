"""Adapters for the network, the identity provider and the row-store."""
