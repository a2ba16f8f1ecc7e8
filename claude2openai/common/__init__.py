"""
Shared helpers: error taxonomy and SSE framing
"""
