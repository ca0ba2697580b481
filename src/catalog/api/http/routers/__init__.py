"""HTTP routers for the catalog."""
