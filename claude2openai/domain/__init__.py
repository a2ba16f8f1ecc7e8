"""
Domain model module initialization
"""
