"""Remote media service providers.

Each provider module implements the async job pattern:
  POST create job → poll status → return result URL
"""
