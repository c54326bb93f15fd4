"""
contactsync
~~~~~~~~~~~

The bulk contact import and export system.
"""
