# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

"""Constants and fallback values of the zone configuration engine"""

import os

from fwzoneconf.config import dbus  # noqa: F401

ETC_FWZONECONF = os.environ.get("FWZONECONF_ETC", "/etc/fwzoneconf")
FWZONECONF_CONF = os.path.join(ETC_FWZONECONF, "fwzoneconf.conf")

COMMANDS = {
    "firewall-cmd": "/usr/bin/firewall-cmd",
}

# attributes of a zone that are tracked for pending backend writes, in
# the order they are written
ZONE_ATTRIBUTES = ("interfaces", "masquerade", "ports", "protocols",
                   "services")

# keys of an import/export payload that are not zones
GLOBAL_KEYS = ("logging", "ignore_logging_broadcast", "start_firewall",
               "enable_firewall")

PORT_PROTOCOLS = ("tcp", "udp", "sctp", "dccp")

# pseudo protocol addressing raw IP protocols instead of ports
IP_PROTOCOL = "ip"

SERVICE_PREFIX = "service:"

BACKEND_VALUES = ("firewall-cmd", "dbus")
LOG_DENIED_VALUES = ("all", "unicast", "broadcast", "multicast", "off")
YES_NO_VALUES = ("yes", "no")

FALLBACK_BACKEND = "firewall-cmd"
FALLBACK_FIREWALL_CMD = COMMANDS["firewall-cmd"]
FALLBACK_PERMANENT = True
FALLBACK_RELOAD_AFTER_WRITE = True
FALLBACK_LOG_DENIED = "off"
FALLBACK_IGNORE_LOGGING_BROADCAST = "yes"
FALLBACK_WARN_UNKNOWN_KEYS = True
