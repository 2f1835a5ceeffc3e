"""Simple web server for uploading files and viewing uploaded files."""

__version__ = "0.1.0"
