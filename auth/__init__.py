"""auth/ -- Accounts, credentials, bearer tokens, and the request auth pipeline.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or posts/.
api/ and posts/ import from auth/, not the other way around.
"""
