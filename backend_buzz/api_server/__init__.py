"""
API server package: HTTP interface for the web client.

Thin routers over the services; the Database is injected per request and
shared across the process.
"""
