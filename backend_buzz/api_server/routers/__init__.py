"""
One router per API area; all mounted under /api by server.py.
"""
