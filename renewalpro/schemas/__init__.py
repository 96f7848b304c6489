"""Pydantic schemas package.

Every schema inherits CamelModel (common.py) so JSON keys are camelCase while
Python attributes stay snake_case.
"""
