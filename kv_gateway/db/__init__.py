"""
Store Connection Module Initialization
"""
