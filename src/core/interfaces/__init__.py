"""Core contracts (Protocols) implemented by the HTTP adapters."""
