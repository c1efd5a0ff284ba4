"""
Core infrastructure: configuration, settings persistence, diagnostic
logging and the exception hierarchy.
"""
