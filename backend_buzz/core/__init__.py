"""
Core utilities: error taxonomy shared by the store, services and API server.
"""
