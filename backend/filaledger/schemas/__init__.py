"""
Pydantic schemas for request validation and API responses
"""
