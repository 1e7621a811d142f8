"""
Unsubscriber - AI-driven email unsubscribe automation.
"""

__version__ = '0.1.0'
