"""
Backend Buzz: backend-for-frontend API for a swipe-based dating app.

Identity and verification, dating profiles, discovery and swipes, matches,
conversations and messaging. All state lives in one document store that is
loaded into memory and written back in full on every mutation.
"""

__version__ = "0.1.0"
