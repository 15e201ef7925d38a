"""xcurl - curl-like HTTP client with classified key/value arguments."""

__version__ = "0.1.0"
