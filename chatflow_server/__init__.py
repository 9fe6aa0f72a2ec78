"""HTTP server for chatflow: flow validation and storage."""
