"""Release services (remote operations against the hosting platform)."""
