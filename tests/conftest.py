"""
Pytest configuration and fixtures.
"""

import logging
from pathlib import Path

import pytest

from entrypoint_config.config.schema import EntryPoints

ALL_PARAMETERS_CAMELCASE = (
    "Name:foo "
    "Address::8000 "
    "TLS:goo,gii "
    "TLS "
    "CA:car "
    "CA.Optional:true "
    "Redirect.EntryPoint:https "
    "Redirect.Regex:http://localhost/(.*) "
    "Redirect.Replacement:http://mydomain/$1 "
    "Redirect.Permanent:true "
    "Compress:true "
    "WhiteListSourceRange:10.42.0.0/16,152.89.1.33/32,afed:be44::/16 "
    "ProxyProtocol.TrustedIPs:192.168.0.1 "
    "ForwardedHeaders.TrustedIPs:10.0.0.3/24,20.0.0.3/24 "
    "Auth.Basic.Users:test:$apr1$H6uskkkW$IgXLP6ewTrSuBkTrqE8wj/,test2:$apr1$d9hr9HBB$4HxwgUir3HP4EsggP/QNo0 "
    "Auth.Digest.Users:test:traefik:a2688e031edb4be6a3797f3882655c05,test2:traefik:518845800f9e2bfb1f1f740ec24f074e "
    "Auth.HeaderField:X-WebAuth-User "
    "Auth.Forward.Address:https://authserver.com/auth "
    "Auth.Forward.TrustForwardHeader:true "
    "Auth.Forward.TLS.CA:path/to/local.crt "
    "Auth.Forward.TLS.CAOptional:true "
    "Auth.Forward.TLS.Cert:path/to/foo.cert "
    "Auth.Forward.TLS.Key:path/to/foo.key "
    "Auth.Forward.TLS.InsecureSkipVerify:true "
)

ALL_PARAMETERS_LOWERCASE = (
    "Name:foo "
    "address::8000 "
    "tls:goo,gii "
    "tls "
    "ca:car "
    "ca.Optional:true "
    "redirect.entryPoint:https "
    "redirect.regex:http://localhost/(.*) "
    "redirect.replacement:http://mydomain/$1 "
    "redirect.permanent:true "
    "compress:true "
    "whiteListSourceRange:10.42.0.0/16,152.89.1.33/32,afed:be44::/16 "
    "proxyProtocol.TrustedIPs:192.168.0.1 "
    "forwardedHeaders.TrustedIPs:10.0.0.3/24,20.0.0.3/24 "
    "auth.basic.users:test:$apr1$H6uskkkW$IgXLP6ewTrSuBkTrqE8wj/,test2:$apr1$d9hr9HBB$4HxwgUir3HP4EsggP/QNo0 "
    "auth.digest.users:test:traefik:a2688e031edb4be6a3797f3882655c05,test2:traefik:518845800f9e2bfb1f1f740ec24f074e "
    "auth.headerField:X-WebAuth-User "
    "auth.forward.address:https://authserver.com/auth "
    "auth.forward.trustForwardHeader:true "
    "auth.forward.tls.ca:path/to/local.crt "
    "auth.forward.tls.caOptional:true "
    "auth.forward.tls.cert:path/to/foo.cert "
    "auth.forward.tls.key:path/to/foo.key "
    "auth.forward.tls.insecureSkipVerify:true "
)


@pytest.fixture(params=[ALL_PARAMETERS_CAMELCASE, ALL_PARAMETERS_LOWERCASE], ids=["camelcase", "lowercase"])
def all_parameters(request) -> str:
    """Expression setting every recognized key, in both spellings."""
    return request.param


@pytest.fixture
def entrypoints() -> EntryPoints:
    """Empty entry point collection, one per test."""
    return EntryPoints()


@pytest.fixture
def expressions_file(tmp_path: Path) -> Path:
    """File with a few entry point expressions, comments and blank lines."""
    path = tmp_path / "entrypoints.conf"
    path.write_text(
        "# plain HTTP, redirected\n"
        "Name:http Address::80 Redirect.EntryPoint:https\n"
        "\n"
        "Name:https Address::443 TLS:cert.pem,key.pem\n"
    )
    return path


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers installed by setup_logging so they never outlive a test."""
    yield
    logger = logging.getLogger("entrypoint_config")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
