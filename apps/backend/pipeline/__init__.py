"""
Job posting scrape pipeline.

Fetches a single static job posting page and extracts title, company and
location using ordered fallback heuristics.
"""

__version__ = "1.0.0"
