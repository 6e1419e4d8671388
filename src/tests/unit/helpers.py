# SPDX-License-Identifier: GPL-2.0-or-later

import copy

import fwzoneconf.errors
from fwzoneconf.core.backend import Backend
from fwzoneconf.errors import BackendCommandError


SERVICES = {
    "dns": (["53/tcp", "53/udp"], []),
    "ftp": (["21/tcp"], []),
    "ipsec": (["500/udp", "4500/udp"], ["ah", "esp"]),
    "ldap": (["389/tcp"], []),
    "ntp": (["123/udp"], []),
    "ssh": (["22/tcp"], []),
    "telnet": (["23/tcp"], []),
}

INTERFACES = ["eth0", "eth1", "eth2", "eth3", "eth4", "lo"]

GOOD_CONFIG = {
    "logging": "off",
    "start_firewall": True,
    "enable_firewall": True,
    "external": {
        "masquerade": True,
        "interfaces": ["eth0", "eth1"],
        "services": ["ssh"],
        "ports": ["999/tcp", "1010/udp"],
    },
    "public": {
        "masquerade": False,
        "interfaces": ["eth2"],
        "services": ["dns"],
        "protocols": ["ah"],
    },
}

BAD_CONFIG = {
    "dmz": {
        "invalid_setting": True,
    },
    "foozone": {
        "masquerade": True,
        "services": ["foobar"],
        "interfaces": ["eth3"],
    },
}


def full_config():
    conf = copy.deepcopy(GOOD_CONFIG)
    conf.update(copy.deepcopy(BAD_CONFIG))
    return conf


def assert_firewall_error(exception, code=None, msg=None):
    assert isinstance(exception, fwzoneconf.errors.FirewallError)
    if code is not None:
        assert exception.code == code
    if msg is not None:
        assert msg in str(exception)


class FakeBackend(Backend):
    """In-memory backend recording every call"""
    name = "fake"

    def __init__(self, permanent=True, running=True, zones=None,
                 services=None):
        super(FakeBackend, self).__init__(permanent)
        self.running = running
        self.services = dict(SERVICES if services is None else services)
        self.zones = { }
        for zone in (zones if zones is not None else
                     ["block", "dmz", "drop", "external", "home",
                      "internal", "public", "trusted", "work"]):
            self.zones[zone] = { "interfaces": [ ], "services": [ ],
                                 "ports": [ ], "protocols": [ ],
                                 "masquerade": False }
        self.log_denied = "off"
        self.calls = [ ]
        # (method, value) pairs answering False
        self.refuse = set()
        # methods raising BackendCommandError
        self.broken = set()

    def _call(self, method, *args):
        self.calls.append((method,) + args)
        if method in self.broken:
            raise BackendCommandError("%s%s" % (method, args))
        return (method, args[-1] if args else None) not in self.refuse

    def changes(self):
        """Calls that change something"""
        return [ call for call in self.calls
                 if call[0].split("_")[0] in ("add", "remove", "set") ]

    def _add(self, method, zone, key, value):
        if not self._call(method, zone, value):
            return False
        if value in self.zones[zone][key]:
            return False
        self.zones[zone][key].append(value)
        return True

    def _remove(self, method, zone, key, value):
        if not self._call(method, zone, value):
            return False
        if value not in self.zones[zone][key]:
            return False
        self.zones[zone][key].remove(value)
        return True

    def is_running(self):
        self._call("is_running")
        return self.running

    def reload(self):
        return self._call("reload")

    def complete_reload(self):
        return self._call("complete_reload")

    def runtime_to_permanent(self):
        return self._call("runtime_to_permanent")

    def get_zones(self):
        self._call("get_zones")
        return sorted(self.zones)

    def get_zone_of_interface(self, interface):
        self._call("get_zone_of_interface", interface)
        for zone in sorted(self.zones):
            if interface in self.zones[zone]["interfaces"]:
                return zone
        return None

    def list_interfaces(self, zone):
        self._call("list_interfaces", zone)
        return list(self.zones[zone]["interfaces"])

    def add_interface(self, zone, interface):
        return self._add("add_interface", zone, "interfaces", interface)

    def remove_interface(self, zone, interface):
        return self._remove("remove_interface", zone, "interfaces", interface)

    def list_services(self, zone):
        self._call("list_services", zone)
        return list(self.zones[zone]["services"])

    def add_service(self, zone, service):
        return self._add("add_service", zone, "services", service)

    def remove_service(self, zone, service):
        return self._remove("remove_service", zone, "services", service)

    def list_ports(self, zone):
        self._call("list_ports", zone)
        return list(self.zones[zone]["ports"])

    def add_port(self, zone, port):
        return self._add("add_port", zone, "ports", port)

    def remove_port(self, zone, port):
        return self._remove("remove_port", zone, "ports", port)

    def list_protocols(self, zone):
        self._call("list_protocols", zone)
        return list(self.zones[zone]["protocols"])

    def add_protocol(self, zone, protocol):
        return self._add("add_protocol", zone, "protocols", protocol)

    def remove_protocol(self, zone, protocol):
        return self._remove("remove_protocol", zone, "protocols", protocol)

    def query_masquerade(self, zone):
        self._call("query_masquerade", zone)
        return self.zones[zone]["masquerade"]

    def add_masquerade(self, zone):
        if not self._call("add_masquerade", zone):
            return False
        self.zones[zone]["masquerade"] = True
        return True

    def remove_masquerade(self, zone):
        if not self._call("remove_masquerade", zone):
            return False
        self.zones[zone]["masquerade"] = False
        return True

    def get_services(self):
        self._call("get_services")
        return sorted(self.services)

    def get_service_ports(self, service):
        self._call("get_service_ports", service)
        if service not in self.services:
            raise BackendCommandError(service)
        return list(self.services[service][0])

    def get_service_protocols(self, service):
        self._call("get_service_protocols", service)
        if service not in self.services:
            raise BackendCommandError(service)
        return list(self.services[service][1])

    def get_service_description(self, service):
        self._call("get_service_description", service)
        if service not in self.services:
            raise BackendCommandError(service)
        return service.upper()

    def get_log_denied(self):
        self._call("get_log_denied")
        return self.log_denied

    def set_log_denied(self, value):
        if not self._call("set_log_denied", value):
            return False
        self.log_denied = value
        return True
