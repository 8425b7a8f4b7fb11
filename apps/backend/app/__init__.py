"""HTTP routers and runtime configuration."""
