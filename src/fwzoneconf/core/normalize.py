# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

"""Translation of SuSEfirewall2 style tokens to the firewalld vocabulary

Everything entering the zone model passes through here once, the model only
holds the canonical forms: bare service names, 'low-high' port ranges and
lower case protocols.
"""

__all__ = [ "canonicalize_service", "canonicalize_port_range",
            "canonicalize_port", "canonicalize_protocol", "port_to_str",
            "is_port_number", "classify",
            "SERVICE", "PORT", "PROTOCOL" ]

from fwzoneconf import config
from fwzoneconf import errors
from fwzoneconf.errors import FirewallError
from fwzoneconf.functions import check_port, checkProtocol, port_parse, \
    port_unparse

SERVICE = "service"
PORT = "port"
PROTOCOL = "protocol"


def canonicalize_service(token):
    if token.startswith(config.SERVICE_PREFIX):
        return token[len(config.SERVICE_PREFIX):]
    return token


def canonicalize_port_range(token):
    """'low:high' and reversed numeric ranges as 'low-high', '80-80' as '80'"""
    port = token.replace(":", "-")
    parts = port.split("-")
    if len(parts) != 2 or not all(part.strip().isdigit() for part in parts):
        return port
    try:
        return port_unparse(*port_parse(port))
    except ValueError:
        # out of range, left to check_port
        return port


def canonicalize_port(token, protocol=None):
    """Split and canonicalize a 'port/protocol' token

    @param protocol used if the token does not carry a protocol itself
    @return tuple (port, protocol)
    """
    if not isinstance(token, str):
        raise FirewallError(errors.INVALID_PORT, str(token))
    if "/" in token:
        (port, _protocol) = token.split("/", 1)
    else:
        (port, _protocol) = (token, protocol)
    if not _protocol:
        raise FirewallError(errors.MISSING_PROTOCOL, token)
    _protocol = _protocol.strip().lower()
    if _protocol not in config.PORT_PROTOCOLS:
        raise FirewallError(errors.INVALID_PROTOCOL,
                            "'%s' not in {'%s'}" % \
                            (_protocol, "'|'".join(config.PORT_PROTOCOLS)))
    port = canonicalize_port_range(port.strip())
    if not check_port(port):
        raise FirewallError(errors.INVALID_PORT, token)
    return (port, _protocol)


def port_to_str(port, protocol):
    return "%s/%s" % (port, protocol)


def is_port_number(token):
    """Whether token is a numeric port or port range, not a name"""
    port = canonicalize_port_range(token.strip())
    parts = port.split("-", 1)
    return all(part.isdigit() for part in parts) and check_port(port)


def canonicalize_protocol(token):
    protocol = token.strip().lower()
    if not checkProtocol(protocol):
        raise FirewallError(errors.INVALID_PROTOCOL, token)
    return protocol


def classify(protocol, token, known_service_names):
    """Decide whether token is a named service, a port or an IP protocol

    @param protocol 'tcp', 'udp', ... or the pseudo protocol 'ip'
    @param known_service_names names the backend knows as services
    """
    if canonicalize_service(token) in known_service_names:
        return SERVICE
    if protocol.lower() == config.IP_PROTOCOL:
        return PROTOCOL
    return PORT
