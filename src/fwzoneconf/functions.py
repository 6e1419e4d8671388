# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

import shlex
import socket
import string

from fwzoneconf.core.logger import log

_BOOL_TRUE = ("yes", "true", "on", "1", "y")
_BOOL_FALSE = ("no", "false", "off", "0", "n")

###############################################################################


def port_parse(port, *, allow_range=True):
    """Parse a port or port range

    Accepts a port id, a service port name known to the system, or a range
    of them delimited by '-' or ':' (the SuSEfirewall2 syntax).

    @return tuple (port_id1, port_id2), port_id2 is None for single ports
    @raise ValueError for invalid input
    """

    def parse_one(port):
        port = port.strip()
        if not port or " " in port:
            raise ValueError("not a valid port")
        try:
            port_id = int(port)
        except ValueError:
            try:
                port_id = socket.getservbyname(port)
            except (OSError, socket.error):
                raise ValueError("not a valid port")
        if port_id < 0 or port_id > 65535:
            raise ValueError("port out of range")
        return port_id

    if isinstance(port, int):
        return parse_one(str(port)), None
    if not isinstance(port, str):
        raise ValueError("not a valid port")

    try:
        return parse_one(port), None
    except ValueError as ex:
        if "out of range" in str(ex):
            raise
        if not allow_range:
            raise

    for delimiter in ("-", ":"):
        if port.count(delimiter) != 1:
            continue
        (p1, p2) = port.split(delimiter)
        port_id1 = parse_one(p1)
        port_id2 = parse_one(p2)
        if port_id1 > port_id2:
            port_id1, port_id2 = port_id2, port_id1
        if port_id1 == port_id2:
            return port_id1, None
        return port_id1, port_id2

    raise ValueError("not a valid port")


def port_unparse(port_id1, port_id2, delimiter="-"):
    if port_id2 is None:
        return "%d" % port_id1
    return "%d%s%d" % (port_id1, delimiter, port_id2)


def getPortRange(ports):
    """Get port range for port range string or single port id

    @param ports an integer or port string or port range string
    @return tuple with start and end port id, or the start port id only,
    -1 if the port can not be parsed and -2 if a port is too big
    """
    try:
        (port_id1, port_id2) = port_parse(ports)
    except ValueError as ex:
        if "out of range" in str(ex):
            return -2
        return -1

    if port_id2 is None:
        return (port_id1,)
    return (port_id1, port_id2)


def check_port(port):
    _range = getPortRange(port)
    if _range == -2:
        log.debug2("'%s': port > 65535" % port)
        return False
    if _range == -1:
        log.debug2("'%s': port is invalid" % port)
        return False
    return True


def checkProtocol(protocol):
    """Check IP protocol id or name

    Names are checked syntactically only, the backend owns the protocol
    table.
    """
    try:
        i = int(protocol)
    except ValueError:
        return checkServiceName(protocol) and protocol[0] in string.ascii_letters
    return i >= 0 and i <= 255


def checkInterface(iface):
    """Check interface string

    @param interface string
    @return True if interface is valid (maximum 16 chars and does not contain ' ', '/', '!', '*'), else False
    """

    if not iface or len(iface) > 16:
        return False
    for ch in [" ", "/", "!", "*"]:
        if ch in iface:
            return False
    return True


def checkSpecialInterface(iface):
    """Special interfaces are interface name patterns like 'tun+'"""
    return checkInterface(iface) and len(iface) > 1 and iface.endswith("+")


def checkServiceName(name):
    if not name or not isinstance(name, str):
        return False
    for char in name:
        if char not in string.ascii_letters and char not in string.digits \
           and char not in "-_.+":
            return False
    return True


def str_to_bool(value, on_default=False):
    """Convert yes/no style values to bool

    @param on_default returned for None and empty values; a ValueError is
    raised for other unknown values if on_default is None
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _BOOL_TRUE:
            return True
        if v in _BOOL_FALSE:
            return False
        if v and on_default is None:
            raise ValueError("'%s' is not a boolean" % value)
    elif value is not None and on_default is None:
        raise ValueError("'%s' is not a boolean" % value)
    return bool(on_default)


def uniqify(_list):
    # removes duplicates from list, whilst preserving order
    output = []
    for x in _list:
        if x not in output:
            output.append(x)
    return output


def joinArgs(args):
    return " ".join(shlex.quote(a) for a in args)
