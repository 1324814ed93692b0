"""Domain services behind the Right Guard API."""
