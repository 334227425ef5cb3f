"""HTTP API for nasbridge."""
