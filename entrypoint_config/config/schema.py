"""
Entry point schema with dataclasses for type safety.

Maps a FlatConfig onto a ListenerConfig. The accepted keys form a closed
enumeration (ListenerKey); each nested record is built by its own
``from_resolved`` step and only exists when one of its keys was given.
"""

from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from ..const import LIST_SEPARATOR, NAME_KEY, TRUE_LITERALS
from ..logging import get_logger
from .parser import FlatConfig, flatten


logger = get_logger("config.schema")


class MissingFieldError(Exception):
    """Exception raised when a mandatory key is absent from an expression."""

    def __init__(self, field_name: str, expression: str = ""):
        self.field_name = field_name
        self.expression = expression
        message = f"Missing required field '{field_name}'"
        if expression:
            message += f" in expression {expression!r}"
        super().__init__(message)


class ListenerKey(Enum):
    """Canonical keys recognized in an entry point expression."""

    NAME = "name"
    ADDRESS = "address"

    # TLS
    TLS = "tls"                    # cert,key
    TLS_ACME = "tls_acme"          # bare TLS marker
    CA = "ca"                      # client CA files, comma separated
    CA_OPTIONAL = "ca_optional"

    # Redirect
    REDIRECT_ENTRYPOINT = "redirect_entrypoint"
    REDIRECT_REGEX = "redirect_regex"
    REDIRECT_REPLACEMENT = "redirect_replacement"
    REDIRECT_PERMANENT = "redirect_permanent"

    COMPRESS = "compress"
    WHITELIST_SOURCE_RANGE = "whitelistsourcerange"

    # Connection metadata trust
    PROXY_PROTOCOL_INSECURE = "proxyprotocol_insecure"
    PROXY_PROTOCOL_TRUSTED_IPS = "proxyprotocol_trustedips"
    FORWARDED_HEADERS_INSECURE = "forwardedheaders_insecure"
    FORWARDED_HEADERS_TRUSTED_IPS = "forwardedheaders_trustedips"

    # Authentication
    AUTH_BASIC_USERS = "auth_basic_users"
    AUTH_DIGEST_USERS = "auth_digest_users"
    AUTH_HEADER_FIELD = "auth_headerfield"
    AUTH_FORWARD_ADDRESS = "auth_forward_address"
    AUTH_FORWARD_TRUST_FORWARD_HEADER = "auth_forward_trustforwardheader"
    AUTH_FORWARD_TLS_CA = "auth_forward_tls_ca"
    AUTH_FORWARD_TLS_CA_OPTIONAL = "auth_forward_tls_caoptional"
    AUTH_FORWARD_TLS_CERT = "auth_forward_tls_cert"
    AUTH_FORWARD_TLS_KEY = "auth_forward_tls_key"
    AUTH_FORWARD_TLS_INSECURE_SKIP_VERIFY = "auth_forward_tls_insecureskipverify"

    @classmethod
    def lookup(cls, canonical: str) -> "ListenerKey | None":
        """Resolve a canonical key, None if it is not recognized."""
        try:
            return cls(canonical)
        except ValueError:
            return None


def _keys_with_prefix(prefix: str) -> frozenset[ListenerKey]:
    return frozenset(key for key in ListenerKey if key.value.startswith(prefix))


# Keys whose presence instantiates each nested record
CLIENT_CA_KEYS = frozenset({ListenerKey.CA, ListenerKey.CA_OPTIONAL})
TLS_KEYS = frozenset({ListenerKey.TLS, ListenerKey.TLS_ACME}) | CLIENT_CA_KEYS
REDIRECT_KEYS = _keys_with_prefix("redirect_")
PROXY_PROTOCOL_KEYS = _keys_with_prefix("proxyprotocol_")
AUTH_KEYS = _keys_with_prefix("auth_")
FORWARD_AUTH_KEYS = _keys_with_prefix("auth_forward_")
FORWARD_AUTH_TLS_KEYS = _keys_with_prefix("auth_forward_tls_")

# Any key under this prefix, recognized or not, counts as configuring
# forwarded-header trust
FORWARDED_HEADERS_PREFIX = "forwardedheaders_"


def to_bool(value: str | None) -> bool:
    """
    Boolean coercion of a raw value.

    True only for "on", "true" and "enable" (any case); every other value,
    and None, is False.
    """
    return value is not None and value.lower() in TRUE_LITERALS


def is_true(flat: Mapping[str, str], key: str) -> bool:
    """Check if ``key`` is present in ``flat`` with a true literal."""
    return to_bool(flat.get(key))


def split_list(value: str) -> list[str]:
    """
    Split a comma separated value.

    Segments are not trimmed and empty segments are kept; an empty value
    is an empty list.
    """
    if not value:
        return []
    return value.split(LIST_SEPARATOR)


@dataclass
class ResolvedConfig:
    """
    A FlatConfig with its keys resolved against ListenerKey.

    Keys that are not recognized are kept aside in ``unknown``.
    """
    values: dict[ListenerKey, str] = field(default_factory=dict)
    unknown: list[str] = field(default_factory=list)
    flat: FlatConfig = field(default_factory=FlatConfig)

    @classmethod
    def from_flat(cls, flat: Mapping[str, str]) -> "ResolvedConfig":
        if not isinstance(flat, FlatConfig):
            flat = FlatConfig(flat)

        resolved = cls(flat=flat)
        for canonical, value in flat.items():
            key = ListenerKey.lookup(canonical)
            if key is None:
                resolved.unknown.append(canonical)
            else:
                resolved.values[key] = value
        return resolved

    def has(self, key: ListenerKey) -> bool:
        return key in self.values

    def has_any(self, keys: Iterable[ListenerKey]) -> bool:
        """Check if at least one of ``keys`` is present."""
        return any(key in self.values for key in keys)

    def get_value(self, key: ListenerKey, default: str = "") -> str:
        return self.values.get(key, default)

    def get_bool(self, key: ListenerKey) -> bool:
        return to_bool(self.values.get(key))

    def get_list(self, key: ListenerKey) -> list[str] | None:
        """Split value of ``key``, None if absent."""
        if key not in self.values:
            return None
        return split_list(self.values[key])


@dataclass
class Certificate:
    """A certificate/key pair, each a file path or inline content."""
    cert_file: str = ""
    key_file: str = ""

    @classmethod
    def from_pair(cls, value: str) -> "Certificate":
        """
        Create Certificate from a ``cert,key`` value.

        Missing elements are empty strings:
            "goo,gii" -> Certificate("goo", "gii")
            "goo"     -> Certificate("goo", "")
        """
        parts = value.split(LIST_SEPARATOR)
        cert_file = parts[0] if parts else ""
        key_file = parts[1] if len(parts) > 1 else ""
        return cls(cert_file=cert_file, key_file=key_file)


@dataclass
class ClientCASettings:
    """Certificate authorities used to verify client certificates."""
    files: list[str] = field(default_factory=list)
    optional: bool = False  # peer certificate not mandatory

    @classmethod
    def from_resolved(cls, resolved: ResolvedConfig) -> "ClientCASettings | None":
        if not resolved.has_any(CLIENT_CA_KEYS):
            return None
        return cls(
            files=resolved.get_list(ListenerKey.CA) or [],
            optional=resolved.get_bool(ListenerKey.CA_OPTIONAL),
        )


@dataclass
class TLSSettings:
    """TLS termination settings of an entry point."""
    certificates: list[Certificate] = field(default_factory=list)
    client_ca: ClientCASettings | None = None

    @classmethod
    def from_resolved(cls, resolved: ResolvedConfig) -> "TLSSettings | None":
        """
        Create TLSSettings when any TLS or CA key is present.

        The bare TLS marker alone yields settings without certificates;
        certificates are then provisioned elsewhere.
        """
        if not resolved.has_any(TLS_KEYS):
            return None

        certificates = []
        if resolved.has(ListenerKey.TLS):
            certificates.append(Certificate.from_pair(resolved.get_value(ListenerKey.TLS)))

        return cls(
            certificates=certificates,
            client_ca=ClientCASettings.from_resolved(resolved),
        )


@dataclass
class RedirectRule:
    """Redirect to another entry point and/or through a regex replacement."""
    entry_point: str = ""
    regex: str = ""
    replacement: str = ""
    permanent: bool = False

    @classmethod
    def from_resolved(cls, resolved: ResolvedConfig) -> "RedirectRule | None":
        if not resolved.has_any(REDIRECT_KEYS):
            return None
        return cls(
            entry_point=resolved.get_value(ListenerKey.REDIRECT_ENTRYPOINT),
            regex=resolved.get_value(ListenerKey.REDIRECT_REGEX),
            replacement=resolved.get_value(ListenerKey.REDIRECT_REPLACEMENT),
            permanent=resolved.get_bool(ListenerKey.REDIRECT_PERMANENT),
        )


@dataclass
class BasicAuth:
    """Basic authentication credentials (``user:hash`` entries)."""
    users: list[str] = field(default_factory=list)


@dataclass
class DigestAuth:
    """Digest authentication credentials (``user:realm:hash`` entries)."""
    users: list[str] = field(default_factory=list)


@dataclass
class ClientTLS:
    """TLS settings used when calling the forward authentication server."""
    ca: str = ""
    ca_optional: bool = False
    cert: str = ""
    key: str = ""
    insecure_skip_verify: bool = False

    @classmethod
    def from_resolved(cls, resolved: ResolvedConfig) -> "ClientTLS | None":
        if not resolved.has_any(FORWARD_AUTH_TLS_KEYS):
            return None
        return cls(
            ca=resolved.get_value(ListenerKey.AUTH_FORWARD_TLS_CA),
            ca_optional=resolved.get_bool(ListenerKey.AUTH_FORWARD_TLS_CA_OPTIONAL),
            cert=resolved.get_value(ListenerKey.AUTH_FORWARD_TLS_CERT),
            key=resolved.get_value(ListenerKey.AUTH_FORWARD_TLS_KEY),
            insecure_skip_verify=resolved.get_bool(ListenerKey.AUTH_FORWARD_TLS_INSECURE_SKIP_VERIFY),
        )


@dataclass
class ForwardAuth:
    """Delegation of authentication to a remote server."""
    address: str = ""
    trust_forward_header: bool = False
    tls: ClientTLS | None = None

    @classmethod
    def from_resolved(cls, resolved: ResolvedConfig) -> "ForwardAuth | None":
        if not resolved.has_any(FORWARD_AUTH_KEYS):
            return None
        return cls(
            address=resolved.get_value(ListenerKey.AUTH_FORWARD_ADDRESS),
            trust_forward_header=resolved.get_bool(ListenerKey.AUTH_FORWARD_TRUST_FORWARD_HEADER),
            tls=ClientTLS.from_resolved(resolved),
        )


@dataclass
class AuthSettings:
    """Authentication settings of an entry point."""
    basic: BasicAuth | None = None
    digest: DigestAuth | None = None
    forward: ForwardAuth | None = None
    header_field: str = ""  # header receiving the authenticated user name

    @classmethod
    def from_resolved(cls, resolved: ResolvedConfig) -> "AuthSettings | None":
        if not resolved.has_any(AUTH_KEYS):
            return None

        basic_users = resolved.get_list(ListenerKey.AUTH_BASIC_USERS)
        digest_users = resolved.get_list(ListenerKey.AUTH_DIGEST_USERS)

        return cls(
            basic=BasicAuth(users=basic_users) if basic_users is not None else None,
            digest=DigestAuth(users=digest_users) if digest_users is not None else None,
            forward=ForwardAuth.from_resolved(resolved),
            header_field=resolved.get_value(ListenerKey.AUTH_HEADER_FIELD),
        )


@dataclass
class ProxyProtocolSettings:
    """Which sources may send a PROXY protocol header."""
    insecure: bool = False  # trust every source
    trusted_ips: list[str] = field(default_factory=list)

    @classmethod
    def from_resolved(cls, resolved: ResolvedConfig) -> "ProxyProtocolSettings | None":
        if not resolved.has_any(PROXY_PROTOCOL_KEYS):
            return None
        return cls(
            insecure=resolved.get_bool(ListenerKey.PROXY_PROTOCOL_INSECURE),
            trusted_ips=resolved.get_list(ListenerKey.PROXY_PROTOCOL_TRUSTED_IPS) or [],
        )


@dataclass
class ForwardedHeadersSettings:
    """Which sources are trusted for X-Forwarded-* headers."""
    insecure: bool = True  # trust every source
    trusted_ips: list[str] = field(default_factory=list)

    @classmethod
    def from_resolved(cls, resolved: ResolvedConfig) -> "ForwardedHeadersSettings":
        """
        Create ForwardedHeadersSettings; never None.

        Trusting every source is the default only while forwarded-header
        trust is not configured at all. Once any forwardedheaders_* key is
        given, ``insecure`` is false unless set explicitly.
        """
        if not resolved.flat.has_prefix(FORWARDED_HEADERS_PREFIX):
            return cls(insecure=True)

        return cls(
            insecure=resolved.get_bool(ListenerKey.FORWARDED_HEADERS_INSECURE),
            trusted_ips=resolved.get_list(ListenerKey.FORWARDED_HEADERS_TRUSTED_IPS) or [],
        )


@dataclass
class ListenerConfig:
    """Configuration of one entry point. Its name is the key in EntryPoints."""
    address: str = ""
    tls: TLSSettings | None = None
    redirect: RedirectRule | None = None
    auth: AuthSettings | None = None
    whitelist_source_range: list[str] | None = None
    compress: bool = False
    proxy_protocol: ProxyProtocolSettings | None = None
    forwarded_headers: ForwardedHeadersSettings = field(default_factory=ForwardedHeadersSettings)

    @classmethod
    def from_resolved(cls, resolved: ResolvedConfig) -> "ListenerConfig":
        return cls(
            address=resolved.get_value(ListenerKey.ADDRESS),
            tls=TLSSettings.from_resolved(resolved),
            redirect=RedirectRule.from_resolved(resolved),
            auth=AuthSettings.from_resolved(resolved),
            whitelist_source_range=resolved.get_list(ListenerKey.WHITELIST_SOURCE_RANGE),
            compress=resolved.get_bool(ListenerKey.COMPRESS),
            proxy_protocol=ProxyProtocolSettings.from_resolved(resolved),
            forwarded_headers=ForwardedHeadersSettings.from_resolved(resolved),
        )

    @classmethod
    def from_flat(cls, flat: Mapping[str, str]) -> "ListenerConfig":
        """Create ListenerConfig from a FlatConfig, ignoring its name."""
        resolved = ResolvedConfig.from_flat(flat)
        for key in resolved.unknown:
            logger.debug(f"Ignoring unrecognized key '{key}'")
        return cls.from_resolved(resolved)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def build_entrypoint(flat: Mapping[str, str]) -> tuple[str, ListenerConfig]:
    """
    Map a FlatConfig to its entry point name and configuration.

    Args:
        flat: Flattened expression

    Returns:
        (name, ListenerConfig) tuple

    Raises:
        MissingFieldError: If the expression has no name
    """
    if NAME_KEY not in flat:
        raise MissingFieldError(NAME_KEY, getattr(flat, "expression", ""))
    return flat[NAME_KEY], ListenerConfig.from_flat(flat)


class EntryPoints(dict[str, ListenerConfig]):
    """
    Entry point configurations keyed by name.

    Behaves like a repeatable command-line flag: every ``set`` call parses
    one expression and adds (or replaces) one entry point.

    Usage:
        entrypoints = EntryPoints()
        entrypoints.set("Name:http Address::80")
        entrypoints.set("Name:https Address::443 TLS")
    """

    def set(self, expression: str) -> str:
        """
        Parse ``expression`` and store the result under its name.

        Returns:
            Name of the entry point

        Raises:
            MissingFieldError: If the expression has no name; the
                collection is left unchanged
        """
        return self.set_flat(flatten(expression))

    def set_flat(self, flat: Mapping[str, str]) -> str:
        """Store the entry point described by an already flattened expression."""
        name, config = build_entrypoint(flat)
        if name in self:
            logger.debug(f"Replacing entry point '{name}'")
        self[name] = config
        logger.debug(f"Entry point '{name}' configured")
        return name

    def get_value(self) -> "EntryPoints":
        return self

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {name: config.to_dict() for name, config in self.items()}

    def __str__(self) -> str:
        return ",".join(self)
