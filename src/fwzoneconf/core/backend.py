# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

"""Backend adapter interface

A backend executes one firewalld operation per call. Operations that change
or query something answer with a boolean (False for "no"/"not done"),
listing operations with lists of tokens. If a call can not be interpreted
at all, a BackendCommandError is raised.
"""

__all__ = [ "Backend", "create_backend" ]

from fwzoneconf import config
from fwzoneconf import errors
from fwzoneconf.errors import FirewallError


class Backend(object):
    """ Abstract backend adapter """
    name = None

    def __init__(self, permanent=True):
        self.permanent = permanent

    def __repr__(self):
        return "%s(permanent=%r)" % (self.__class__.__name__, self.permanent)

    # state

    def is_running(self):
        raise NotImplementedError()

    def reload(self):
        raise NotImplementedError()

    def complete_reload(self):
        raise NotImplementedError()

    def runtime_to_permanent(self):
        raise NotImplementedError()

    # zones

    def get_zones(self):
        raise NotImplementedError()

    def get_zone_of_interface(self, interface):
        raise NotImplementedError()

    def list_interfaces(self, zone):
        raise NotImplementedError()

    def add_interface(self, zone, interface):
        raise NotImplementedError()

    def remove_interface(self, zone, interface):
        raise NotImplementedError()

    def list_services(self, zone):
        raise NotImplementedError()

    def add_service(self, zone, service):
        raise NotImplementedError()

    def remove_service(self, zone, service):
        raise NotImplementedError()

    def list_ports(self, zone):
        """Ports of the zone as 'port/protocol' strings"""
        raise NotImplementedError()

    def add_port(self, zone, port):
        raise NotImplementedError()

    def remove_port(self, zone, port):
        raise NotImplementedError()

    def list_protocols(self, zone):
        raise NotImplementedError()

    def add_protocol(self, zone, protocol):
        raise NotImplementedError()

    def remove_protocol(self, zone, protocol):
        raise NotImplementedError()

    def query_masquerade(self, zone):
        raise NotImplementedError()

    def add_masquerade(self, zone):
        raise NotImplementedError()

    def remove_masquerade(self, zone):
        raise NotImplementedError()

    # services

    def get_services(self):
        """Names of all services the backend supports"""
        raise NotImplementedError()

    def get_service_ports(self, service):
        raise NotImplementedError()

    def get_service_protocols(self, service):
        raise NotImplementedError()

    def get_service_description(self, service):
        raise NotImplementedError()

    # logging

    def get_log_denied(self):
        raise NotImplementedError()

    def set_log_denied(self, value):
        raise NotImplementedError()


def create_backend(name=config.FALLBACK_BACKEND, **kwargs):
    """Create the backend adapter for the configuration session"""
    if name == "firewall-cmd":
        from fwzoneconf.core.firewallcmd import firewallcmd
        return firewallcmd(**kwargs)
    if name == "dbus":
        from fwzoneconf.core.dbusapi import dbusapi
        return dbusapi(**kwargs)
    raise FirewallError(errors.INVALID_VALUE,
                        "Unsupported backend '%s', choose from '%s'" % \
                        (name, "','".join(config.BACKEND_VALUES)))
