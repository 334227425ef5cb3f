"""Protocol adapters and local photo sources."""
