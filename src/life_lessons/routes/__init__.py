"""HTTP routers for lessons, contributors and payments."""
