# addinproxy/__init__.py
"""Serverless CORS proxies for the PromptEmail Outlook add-in."""

__version__ = "1.0.0"
