"""rightguard: know-your-rights guidance, incident recording, and emergency alerts.

This package contains the Right Guard backend API, its domain services, and the
client core (persistence gateway, session store, recording session) used by the
presentation layer.
"""

__version__ = "1.0.0"
