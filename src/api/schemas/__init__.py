"""Pydantic schema models for API request/response validation.

- **errors**: ``ApiModel`` base with camel case aliases and the standard
  error payload documented as the default response of every operation
"""
