"""
Application constants and metadata.
"""

# Application info
APP_NAME = "Entrypoint Config"
APP_VERSION = "0.1.0"

# Literals accepted as boolean true (compared case-insensitively)
TRUE_LITERALS = frozenset({"on", "true", "enable"})

# Expression syntax
KEY_VALUE_SEPARATOR = ":"
PATH_SEPARATOR = "."
CANONICAL_SEPARATOR = "_"
LIST_SEPARATOR = ","

# Bare marker that requests automatic certificate provisioning
TLS_MARKER = "tls"
TLS_ACME_KEY = "tls_acme"
TLS_ACME_VALUE = "TLS"  # stored whatever the marker's case

# Mandatory key holding the listener name
NAME_KEY = "name"
