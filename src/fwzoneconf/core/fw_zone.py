# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

from fwzoneconf import config
from fwzoneconf.core.io.zone import Zone
from fwzoneconf.core.logger import log
from fwzoneconf.functions import uniqify
from fwzoneconf import errors
from fwzoneconf.errors import FirewallError


class FirewallZone(object):
    """In-memory zone settings of a configuration session

    Zones are created on first modification. Queries on zones that were
    never configured, or that are not known at all, answer with empty
    results. Every modification records the changed attribute in the
    modified set of the zone, the reconciler pushes these to the backend.
    """

    def __init__(self, catalog):
        self._catalog = catalog
        self._zones = { }

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self._zones)

    def cleanup(self):
        self._zones.clear()

    # zones

    def get_zones(self):
        return sorted(self._zones.keys())

    def _lookup(self, zone):
        """Zone object for queries, None if there is none"""
        try:
            _zone = self._catalog.check_zone(zone)
        except FirewallError:
            return None
        return self._zones.get(_zone)

    def get_zone(self, zone):
        """Zone object for modifications, raises UnknownZoneError"""
        _zone = self._catalog.check_zone(zone)
        if _zone not in self._zones:
            log.debug1("Creating zone '%s'", _zone)
            self._zones[_zone] = Zone(_zone)
        return self._zones[_zone]

    def replace_zone(self, obj):
        """Install zone settings read from the backend as the new baseline"""
        self._catalog.check_zone(obj.name)
        obj.modified.clear()
        self._zones[obj.name] = obj

    def import_zone(self, zone, settings):
        """Take over checked settings of an imported zone

        An import describes the complete zone, so every attribute is marked
        for the next write.
        """
        obj = self.get_zone(zone)
        interfaces = settings.get("interfaces", [ ])
        special_interfaces = settings.get("special_interfaces", [ ])
        for interface in obj.get_all_interfaces():
            if interface not in interfaces + special_interfaces:
                self._remove_interface(obj, interface)
        for interface in interfaces:
            self.attach_interface(obj.name, interface)
        for interface in special_interfaces:
            self.attach_special_interface(obj.name, interface)
        for key in ("services", "ports", "protocols"):
            setattr(obj, key, list(settings.get(key, [ ])))
        obj.masquerade = settings.get("masquerade", False)
        obj.modified.update(config.ZONE_ATTRIBUTES)
        return obj.name

    # dirty tracking

    def mark_dirty(self, zone, attribute):
        obj = self.get_zone(zone)
        obj.modified.add(Zone.attribute_of(attribute))

    def clear_dirty(self, zone=None, attribute=None):
        """Forget pending changes of a zone, or of all zones if zone is None

        With attribute only that tag is cleared.
        """
        if zone is None:
            for obj in self._zones.values():
                obj.modified.clear()
            return
        obj = self._lookup(zone)
        if obj is None:
            return
        if attribute is None:
            obj.modified.clear()
        else:
            obj.modified.discard(Zone.attribute_of(attribute))

    def get_modified(self, zone):
        obj = self._lookup(zone)
        if obj is None:
            return set()
        return set(obj.modified)

    def get_dirty_zones(self):
        return [ name for name in self.get_zones()
                 if self._zones[name].modified ]

    # interfaces

    def get_zone_of_interface(self, interface):
        for name in self.get_zones():
            if interface in self._zones[name].get_all_interfaces():
                # an interface can only be part of one zone
                return name
        return None

    def attach_interface(self, zone, interface, special=False):
        obj = self.get_zone(zone)
        setting = "special_interfaces" if special else "interfaces"
        if interface in getattr(obj, setting):
            return obj.name

        for other in self._zones.values():
            if other is obj:
                continue
            if interface in other.get_all_interfaces():
                log.debug1("Removing interface '%s' from zone '%s'",
                           interface, other.name)
                self._remove_interface(other, interface)

        log.debug1("Setting zone of interface '%s' to '%s'", interface,
                   obj.name)
        getattr(obj, setting).append(interface)
        obj.modified.add("interfaces")
        return obj.name

    def attach_special_interface(self, zone, interface):
        return self.attach_interface(zone, interface, special=True)

    def _remove_interface(self, obj, interface):
        for setting in ("interfaces", "special_interfaces"):
            if interface in getattr(obj, setting):
                getattr(obj, setting).remove(interface)
                obj.modified.add("interfaces")

    def detach_interface(self, zone, interface):
        obj = self._lookup(zone)
        if obj is None:
            return
        self._remove_interface(obj, interface)

    def list_interfaces(self, zone):
        obj = self._lookup(zone)
        if obj is None:
            return [ ]
        return list(obj.interfaces)

    def list_special_interfaces(self, zone):
        obj = self._lookup(zone)
        if obj is None:
            return [ ]
        return list(obj.special_interfaces)

    # services

    def list_services(self, zone):
        obj = self._lookup(zone)
        if obj is None:
            return [ ]
        return list(obj.services)

    def query_service(self, zone, service):
        return service in self.list_services(zone)

    def add_service(self, zone, service):
        obj = self.get_zone(zone)
        if service not in obj.services:
            obj.services.append(service)
            obj.modified.add("services")
        return obj.name

    def remove_service(self, zone, service):
        obj = self.get_zone(zone)
        if service in obj.services:
            obj.services.remove(service)
            obj.modified.add("services")
        return obj.name

    def set_services(self, zone, services):
        obj = self.get_zone(zone)
        new_services = uniqify(services)
        if new_services != obj.services:
            obj.services = new_services
            obj.modified.add("services")
        return obj.name

    # ports

    def list_ports(self, zone):
        obj = self._lookup(zone)
        if obj is None:
            return [ ]
        return list(obj.ports)

    def ports_for(self, zone, protocol):
        obj = self._lookup(zone)
        if obj is None:
            return [ ]
        return obj.ports_for(protocol)

    def query_port(self, zone, port, protocol):
        return (port, protocol) in self.list_ports(zone)

    def add_port(self, zone, port, protocol):
        obj = self.get_zone(zone)
        if (port, protocol) not in obj.ports:
            obj.ports.append((port, protocol))
            obj.modified.add("ports")
        return obj.name

    def remove_port(self, zone, port, protocol):
        obj = self.get_zone(zone)
        if (port, protocol) in obj.ports:
            obj.ports.remove((port, protocol))
            obj.modified.add("ports")
        return obj.name

    def set_ports(self, zone, protocol, ports):
        """Replace the ports of one protocol, others are kept"""
        if protocol not in config.PORT_PROTOCOLS:
            raise FirewallError(errors.INVALID_PROTOCOL, protocol)
        obj = self.get_zone(zone)
        new_ports = [ (port, proto) for (port, proto) in obj.ports
                      if proto != protocol ]
        for port in ports:
            if (port, protocol) not in new_ports:
                new_ports.append((port, protocol))
        if new_ports != obj.ports:
            obj.ports = new_ports
            obj.modified.add("ports")
        return obj.name

    # protocols

    def list_protocols(self, zone):
        obj = self._lookup(zone)
        if obj is None:
            return [ ]
        return list(obj.protocols)

    def query_protocol(self, zone, protocol):
        return protocol in self.list_protocols(zone)

    def add_protocol(self, zone, protocol):
        obj = self.get_zone(zone)
        if protocol not in obj.protocols:
            obj.protocols.append(protocol)
            obj.modified.add("protocols")
        return obj.name

    def remove_protocol(self, zone, protocol):
        obj = self.get_zone(zone)
        if protocol in obj.protocols:
            obj.protocols.remove(protocol)
            obj.modified.add("protocols")
        return obj.name

    def set_protocols(self, zone, protocols):
        obj = self.get_zone(zone)
        new_protocols = uniqify(protocols)
        if new_protocols != obj.protocols:
            obj.protocols = new_protocols
            obj.modified.add("protocols")
        return obj.name

    # masquerade

    def query_masquerade(self, zone):
        obj = self._lookup(zone)
        if obj is None:
            return False
        return obj.masquerade

    def set_masquerade(self, zone, masquerade):
        obj = self.get_zone(zone)
        if obj.masquerade != masquerade:
            obj.masquerade = masquerade
            obj.modified.add("masquerade")
        return obj.name

    # export

    def export_config_dict(self):
        return { name: self._zones[name].export_config_dict()
                 for name in self.get_zones() }
