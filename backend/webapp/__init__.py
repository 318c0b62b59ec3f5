"""WebApp — server-side web framework: form validation and the project CLI."""

__version__ = "1.0.0"
