"""Portal application for the PHC healthcare site.

This package holds the account model, the session gate that guards
every protected route, the credential codec and the admin upload
endpoint.
"""
