# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

"""Names of the firewalld D-Bus API used by the dbus backend"""

DBUS_BUS_NAME_VERSION = 1

DBUS_INTERFACE = "org.fedoraproject.FirewallD%d" % DBUS_BUS_NAME_VERSION
DBUS_INTERFACE_ZONE = DBUS_INTERFACE+".zone"
DBUS_INTERFACE_CONFIG = DBUS_INTERFACE+".config"
DBUS_INTERFACE_CONFIG_ZONE = DBUS_INTERFACE_CONFIG+".zone"
DBUS_INTERFACE_CONFIG_SERVICE = DBUS_INTERFACE_CONFIG+".service"

DBUS_PATH = "/org/fedoraproject/FirewallD%d" % DBUS_BUS_NAME_VERSION
DBUS_PATH_CONFIG = DBUS_PATH+"/config"

# firewalld error names that report "nothing to do" instead of a failure
DBUS_NOOP_ERRORS = ("ALREADY_ENABLED", "NOT_ENABLED", "ZONE_ALREADY_SET",
                    "ALREADY_SET")
