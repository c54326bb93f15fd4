"""
contactsync.clients
~~~~~~~~~~~~~~~~~~~

This package contains the remote API clients.
"""
