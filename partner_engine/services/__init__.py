"""
Services.

Business logic of the partner engine.
"""
