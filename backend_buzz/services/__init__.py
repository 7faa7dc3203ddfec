"""
Domain services over the document store.

identity -> profiles -> discovery -> matching -> messaging, plus verification.
Each function takes the Database as its first argument; mutations run inside
db.transaction() and are persisted before the function returns.
"""
