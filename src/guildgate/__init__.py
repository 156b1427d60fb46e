"""Discord OAuth2 login that checks the user belongs to a required guild."""

__version__ = "0.1.0"
