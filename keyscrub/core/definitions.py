# keyscrub/core/definitions.py

"""Label and keylist constants shared by the engine and the service layer."""


class Label:
    """Labels used by the packaged indicator set.

    A label becomes the stem of every placeholder issued for it, so
    ``Label.ADDRESS`` yields ``Address1``, ``Address2`` and so on.
    """

    # Network
    ADDRESS = "Address"
    MAC = "MACAddress"
    HOSTNAME = "Hostname"
    URL = "URL"

    # Identity
    USERNAME = "Username"
    EMAIL = "Email"
    SID = "SID"


# Line separating key entries from file records in a persisted keylist
KEYLIST_FILES_HEADER = "List of files using this Key:"

# Separator between a record's timestamp and its output path
KEYLIST_RECORD_SEPARATOR = " - "
