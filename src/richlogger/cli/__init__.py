"""
Command-line tools for RichLogger.
"""
