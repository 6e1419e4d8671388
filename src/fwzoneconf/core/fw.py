# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

__all__ = [ "Firewall" ]

from fwzoneconf import config
from fwzoneconf.core import normalize
from fwzoneconf.core.backend import create_backend
from fwzoneconf.core.fw_catalog import ZoneCatalog
from fwzoneconf.core.fw_services import ServiceCatalog
from fwzoneconf.core.fw_zone import FirewallZone
from fwzoneconf.core.io.zone import Zone
from fwzoneconf.core.logger import log
from fwzoneconf.functions import checkServiceName, checkSpecialInterface, \
    uniqify
from fwzoneconf import errors
from fwzoneconf.errors import FirewallError, ServiceNotFoundError

############################################################################
#
# class Firewall
#
############################################################################


class Firewall(object):
    """Configuration session reconciling the zone model with the backend

    Changes are collected in the zone model, read() and write() are the only
    points where the backend state is synchronized.
    """

    def __init__(self, backend, catalog=None, interfaces=None,
                 reload_after_write=config.FALLBACK_RELOAD_AFTER_WRITE,
                 warn_unknown_keys=config.FALLBACK_WARN_UNKNOWN_KEYS,
                 log_denied=config.FALLBACK_LOG_DENIED):
        self.backend = backend
        self.catalog = catalog if catalog is not None else ZoneCatalog()
        self.service = ServiceCatalog(backend)
        self.zone = FirewallZone(self.catalog)
        # existing interfaces, None if they are not known
        self._interfaces = list(interfaces) if interfaces is not None else None
        self._reload_after_write = reload_after_write
        self._warn_unknown_keys = warn_unknown_keys
        self._fallback_log_denied = log_denied

        self.__init_vars()

    def __repr__(self):
        return "%s(%r, %r, %r, %r, %r)" % (
            self.__class__.__name__,
            self.backend,
            self._log_denied,
            self._start_firewall,
            self._enable_firewall,
            self._running,
        )

    def __init_vars(self):
        self._log_denied = self._fallback_log_denied
        self._log_denied_modified = False
        self._ignore_logging_broadcast = \
            config.FALLBACK_IGNORE_LOGGING_BROADCAST
        self._start_firewall = False
        self._enable_firewall = False
        self._running = None

    @classmethod
    def from_conf(cls, conf, interfaces=None):
        """Create a session as configured in a fwzoneconf_conf object"""
        if conf.get("Backend") is None:
            conf.set_defaults()
        (name, kwargs) = conf.backend_options()
        log.debug1("Using backend '%s' (%s)", name, kwargs)
        return cls(create_backend(name, **kwargs), interfaces=interfaces,
                   reload_after_write=conf.get("ReloadAfterWrite", bool),
                   warn_unknown_keys=conf.get("WarnUnknownKeys", bool),
                   log_denied=conf.get("LogDenied"))

    def cleanup(self):
        self.zone.cleanup()
        self.service.cleanup()
        self.__init_vars()

    # state

    def is_started(self):
        if self._running is None:
            self._running = self.backend.is_running()
            log.debug1("Backend is %srunning",
                       "" if self._running else "not ")
        return self._running

    def get_start_at_boot(self):
        return self._start_firewall

    def set_start_at_boot(self, enabled):
        self._start_firewall = bool(enabled)

    def get_enable_service(self):
        return self._enable_firewall

    def set_enable_service(self, enabled):
        self._enable_firewall = bool(enabled)

    # zones

    def get_known_firewall_zones(self):
        return self.catalog.known_zones()

    def is_known_zone(self, zone):
        return self.catalog.is_known_zone(zone)

    def get_zone_full_name(self, zone):
        return self.catalog.full_name(zone)

    def _zone_of(self, zone_or_interface):
        """Zone addressed by a zone name or by one of its interfaces"""
        if self.catalog.is_known_zone(zone_or_interface) or \
           self.catalog.canonical_name(zone_or_interface) is not None:
            return self.catalog.check_zone(zone_or_interface)
        return self.zone.get_zone_of_interface(zone_or_interface)

    # import / export

    def import_config(self, raw):
        """Take over a complete configuration

        Unknown zones, unknown zone options and invalid values are left out.
        Every imported zone is marked to be written completely.
        """
        for key in raw:
            value = raw[key]
            if key in config.GLOBAL_KEYS:
                self._import_global(key, value)
                continue
            try:
                zone = self.catalog.check_zone(key)
            except FirewallError:
                self._report("Unknown zone '%s' ignored", key)
                continue
            if not isinstance(value, dict):
                self._report("Settings of zone '%s' ignored, not a mapping",
                             zone)
                continue
            settings = Zone.check_config_dict(
                value, log_warn=self._warn_unknown_keys)
            self.zone.import_zone(zone, settings)
            log.debug1("Imported zone '%s'", zone)

    def _import_global(self, key, value):
        if key == "logging":
            if value not in config.LOG_DENIED_VALUES:
                self._report("Invalid logging setting '%s' ignored", value)
                return
            self.set_logging_settings(None, value)
        elif key == "ignore_logging_broadcast":
            if value not in config.YES_NO_VALUES:
                self._report("Invalid setting '%s' for '%s' ignored", value,
                             key)
                return
            self.set_ignore_logging_broadcast(None, value)
        elif not isinstance(value, bool):
            self._report("Invalid setting '%s' for '%s' ignored", value, key)
        elif key == "start_firewall":
            self.set_start_at_boot(value)
        elif key == "enable_firewall":
            self.set_enable_service(value)

    def _report(self, msg, *args):
        if self._warn_unknown_keys:
            log.warning(msg, *args)
        else:
            log.debug1(msg, *args)

    def export_config(self):
        conf = self.zone.export_config_dict()
        conf["logging"] = self._log_denied
        conf["ignore_logging_broadcast"] = self._ignore_logging_broadcast
        conf["start_firewall"] = self._start_firewall
        conf["enable_firewall"] = self._enable_firewall
        return conf

    # read / write

    def read(self):
        """Replace the zone model with the state of the backend

        The model is only replaced after all zones have been read, a
        BackendCommandError leaves it and its dirty marks untouched.
        """
        backend_zones = self.backend.get_zones()
        for zone in backend_zones:
            if not self.catalog.is_known_zone(zone):
                log.debug1("Zone '%s' is not in the catalog, ignored", zone)
        zones = [ self._read_zone(zone) for zone in self.catalog.known_zones()
                  if zone in backend_zones ]
        log_denied = self.backend.get_log_denied()

        self.zone.cleanup()
        self.service.cleanup()
        self._running = None
        for obj in zones:
            self.zone.replace_zone(obj)
        self._log_denied = log_denied
        self._log_denied_modified = False
        log.debug1("Read %d zones from the backend",
                   len(self.zone.get_zones()))

    def _read_zone(self, zone):
        obj = Zone(zone)
        for interface in self.backend.list_interfaces(zone):
            if checkSpecialInterface(interface):
                obj.special_interfaces.append(interface)
            else:
                obj.interfaces.append(interface)
        obj.services = uniqify(self.backend.list_services(zone))
        for port in self.backend.list_ports(zone):
            try:
                obj.ports.append(normalize.canonicalize_port(port))
            except FirewallError as error:
                log.warning("Zone '%s': port ignored: %s", zone, error)
        obj.ports = uniqify(obj.ports)
        obj.protocols = uniqify(self.backend.list_protocols(zone))
        obj.masquerade = self.backend.query_masquerade(zone)
        return obj

    def write(self):
        """Push modified zone attributes to the backend

        Returns True if every modified attribute has been confirmed by the
        backend. Attributes that failed stay modified for the next write.
        """
        success = True
        written = False
        for zone in self.zone.get_dirty_zones():
            modified = self.zone.get_modified(zone)
            for attribute in config.ZONE_ATTRIBUTES:
                if attribute not in modified:
                    continue
                writer = getattr(self, "_write_%s" % attribute)
                (ok, calls) = writer(zone)
                written = written or calls > 0
                if ok:
                    self.zone.clear_dirty(zone, attribute)
                else:
                    log.error("Failed to write %s of zone '%s'", attribute,
                              zone)
                    success = False

        if self._log_denied_modified:
            if self.backend.set_log_denied(self._log_denied):
                self._log_denied_modified = False
                written = True
            else:
                log.error("Failed to set log denied to '%s'", self._log_denied)
                success = False

        if written and self._reload_after_write and self.backend.permanent \
           and self.is_started():
            log.debug1("Reloading the backend")
            if not self.backend.reload():
                log.warning("Reloading the backend failed")

        self._running = None
        return success

    def _sync(self, zone, current, desired, remove, add):
        """Remove what is not desired, then add what is missing"""
        ok = True
        calls = 0
        for value in current:
            if value not in desired:
                calls += 1
                if not remove(zone, value):
                    log.error("Zone '%s': removing '%s' failed", zone, value)
                    ok = False
        for value in desired:
            if value not in current:
                calls += 1
                if not add(zone, value):
                    log.error("Zone '%s': adding '%s' failed", zone, value)
                    ok = False
        return (ok, calls)

    def _write_interfaces(self, zone):
        desired = self.zone.list_interfaces(zone) + \
            self.zone.list_special_interfaces(zone)
        current = self.backend.list_interfaces(zone)
        return self._sync(zone, current, desired,
                          self.backend.remove_interface, self._add_interface)

    def _add_interface(self, zone, interface):
        # the backend refuses interfaces that are bound to another zone
        other = self.backend.get_zone_of_interface(interface)
        if other is not None and other != zone:
            log.debug1("Removing interface '%s' from zone '%s'", interface,
                       other)
            if not self.backend.remove_interface(other, interface):
                return False
        return self.backend.add_interface(zone, interface)

    def _write_masquerade(self, zone):
        desired = self.zone.query_masquerade(zone)
        if self.backend.query_masquerade(zone) == desired:
            return (True, 0)
        if desired:
            return (self.backend.add_masquerade(zone), 1)
        return (self.backend.remove_masquerade(zone), 1)

    def _write_ports(self, zone):
        desired = [ normalize.port_to_str(port, protocol)
                    for (port, protocol) in self.zone.list_ports(zone) ]
        current = [ ]
        for port in self.backend.list_ports(zone):
            try:
                current.append(normalize.port_to_str(
                    *normalize.canonicalize_port(port)))
            except FirewallError:
                # unparsable ports are kept in the backend untouched
                log.debug1("Zone '%s': port '%s' not handled", zone, port)
        return self._sync(zone, current, desired,
                          self.backend.remove_port, self.backend.add_port)

    def _write_protocols(self, zone):
        return self._sync(zone, self.backend.list_protocols(zone),
                          self.zone.list_protocols(zone),
                          self.backend.remove_protocol,
                          self.backend.add_protocol)

    def _write_services(self, zone):
        return self._sync(zone, self.backend.list_services(zone),
                          self.zone.list_services(zone),
                          self.backend.remove_service,
                          self.backend.add_service)

    # services

    def _known_services(self):
        """Services of the backend, only asked for if it is running"""
        if not self.is_started():
            return [ ]
        return self.service.get_supported_services()

    def _check_service(self, service):
        if self.is_started() and \
           service not in self.service.get_supported_services():
            raise ServiceNotFoundError(service)

    def _valid_service_name(self, service):
        if checkServiceName(service):
            return True
        log.warning("Invalid service name '%s'", service)
        return False

    def _classify(self, protocol, token):
        if token.startswith(config.SERVICE_PREFIX):
            return normalize.SERVICE
        kind = normalize.classify(protocol, token, self._known_services())
        if kind == normalize.PORT and not normalize.is_port_number(token):
            # a name that is neither a port nor a known service
            return normalize.SERVICE
        return kind

    def _service_operation(self, service, protocol, zone_or_interface,
                           on_service, on_port, on_protocol):
        zone = self._zone_of(zone_or_interface)
        if zone is None:
            log.warning("'%s' is neither a zone nor an interface in a zone",
                        zone_or_interface)
            return None
        protocol = protocol.lower()
        kind = self._classify(protocol, service)
        if kind == normalize.SERVICE:
            _service = normalize.canonicalize_service(service)
            if not self._valid_service_name(_service):
                return None
            return on_service(zone, _service)
        if kind == normalize.PROTOCOL:
            try:
                _protocol = normalize.canonicalize_protocol(service)
            except FirewallError as error:
                log.warning("%s", error)
                return None
            return on_protocol(zone, _protocol)
        try:
            (port, _protocol) = normalize.canonicalize_port(service, protocol)
        except FirewallError as error:
            log.warning("%s", error)
            return None
        return on_port(zone, port, _protocol)

    def add_service(self, service, protocol, zone_or_interface):
        """Allow a service, port or IP protocol in a zone

        Numeric tokens are ports of protocol, tokens of protocol 'ip' raw IP
        protocols. Unknown service names raise ServiceNotFoundError if the
        backend is running.
        """
        def _service(zone, _service):
            self._check_service(_service)
            self.zone.add_service(zone, _service)
            return True

        def _port(zone, port, _protocol):
            self.zone.add_port(zone, port, _protocol)
            return True

        def _protocol(zone, _protocol):
            self.zone.add_protocol(zone, _protocol)
            return True

        return self._service_operation(service, protocol, zone_or_interface,
                                       _service, _port, _protocol) is True

    def remove_service(self, service, protocol, zone_or_interface):
        def _service(zone, _service):
            self._check_service(_service)
            self.zone.remove_service(zone, _service)
            return True

        def _port(zone, port, _protocol):
            self.zone.remove_port(zone, port, _protocol)
            return True

        def _protocol(zone, _protocol):
            self.zone.remove_protocol(zone, _protocol)
            return True

        return self._service_operation(service, protocol, zone_or_interface,
                                       _service, _port, _protocol) is True

    def have_service(self, service, protocol, zone_or_interface):
        return self._service_operation(
            service, protocol, zone_or_interface,
            self.zone.query_service, self.zone.query_port,
            self.zone.query_protocol) is True

    def set_services(self, services, interfaces, enabled):
        """Enable or disable services in the zones of interfaces

        Returns False without changing anything if an interface is not part
        of any zone.
        """
        zones = [ ]
        for interface in interfaces:
            zone = self.zone.get_zone_of_interface(interface)
            if zone is None:
                log.warning("Interface '%s' is not part of any zone",
                            interface)
                return False
            zones.append(zone)
        return self.set_services_for_zones(services, uniqify(zones), enabled)

    def set_services_for_zones(self, services, zones, enabled):
        _zones = [ ]
        for zone in zones:
            try:
                _zones.append(self.catalog.check_zone(zone))
            except FirewallError as error:
                log.warning("%s", error)
                return False

        _services = [ normalize.canonicalize_service(service)
                      for service in services ]
        if not all(self._valid_service_name(service)
                   for service in _services):
            return False
        for service in _services:
            self._check_service(service)

        for zone in uniqify(_zones):
            for service in _services:
                if enabled:
                    self.zone.add_service(zone, service)
                else:
                    self.zone.remove_service(zone, service)
            log.debug1("Services %s %s in zone '%s'", _services,
                       "enabled" if enabled else "disabled", zone)
        return True

    def get_services(self, services):
        """Status of services per known zone, {service: {zone: bool}}"""
        result = { }
        for service in services:
            _service = normalize.canonicalize_service(service)
            result[service] = { zone: self.zone.query_service(zone, _service)
                                for zone in self.catalog.known_zones() }
        return result

    def get_services_in_zones(self, services):
        """Status of services per interface, {service: {interface: bool}}"""
        result = { }
        for service in services:
            _service = normalize.canonicalize_service(service)
            result[service] = { }
            for zone in self.zone.get_zones():
                enabled = self.zone.query_service(zone, _service)
                for interface in self.zone.list_interfaces(zone):
                    result[service][interface] = enabled
        return result

    def is_service_supported_in_zone(self, service, zone):
        return self.zone.query_service(zone,
                                       normalize.canonicalize_service(service))

    def get_additional_services(self, protocol, zone):
        """Ports, or for 'ip' raw IP protocols, that are no named service"""
        protocol = protocol.lower()
        known = self._known_services()
        if protocol == config.IP_PROTOCOL:
            tokens = self.zone.list_protocols(zone)
        else:
            tokens = self.zone.ports_for(zone, protocol)
        return [ token for token in tokens
                 if normalize.classify(protocol, token, known) != \
                 normalize.SERVICE ]

    def set_additional_services(self, protocol, zone, tokens):
        """Replace the ports of protocol, or the IP protocols for 'ip'

        The ports of other protocols are not touched. Returns False without
        changing anything if a token is invalid.
        """
        protocol = protocol.lower()
        try:
            if protocol == config.IP_PROTOCOL:
                values = [ normalize.canonicalize_protocol(token)
                           for token in tokens ]
            else:
                values = [ normalize.canonicalize_port(token, protocol)[0]
                           for token in tokens ]
        except FirewallError as error:
            log.warning("%s", error)
            return False

        if protocol == config.IP_PROTOCOL:
            self.zone.set_protocols(zone, values)
        else:
            self.zone.set_ports(zone, protocol, values)
        return True

    def get_allowed_services_for_zone_proto(self, zone, protocol):
        """Ports of protocol followed by the services needing protocol"""
        protocol = protocol.lower()
        if protocol == config.IP_PROTOCOL:
            allowed = self.zone.list_protocols(zone)
        else:
            allowed = self.zone.ports_for(zone, protocol)
        for service in self.zone.list_services(zone):
            if self.service.needs_protocol(service, protocol):
                allowed.append(service)
        return allowed

    # interfaces

    def get_interfaces_in_zone(self, zone):
        return self.zone.list_interfaces(zone)

    def get_special_interfaces_in_zone(self, zone):
        return self.zone.list_special_interfaces(zone)

    def get_zone_of_interface(self, interface):
        return self.zone.get_zone_of_interface(interface)

    def get_zones_of_interfaces(self, interfaces):
        """Zones of the interfaces, None if none of them is in a zone"""
        zones = [ ]
        for interface in interfaces:
            zone = self.zone.get_zone_of_interface(interface)
            if zone is None:
                log.debug1("Interface '%s' is not part of any zone",
                           interface)
            elif zone not in zones:
                zones.append(zone)
        return zones or None

    def add_interface_into_zone(self, interface, zone):
        """Move an existing interface into zone

        Raises UnknownZoneError for unknown zones. Returns False if the
        interface does not exist.
        """
        self.catalog.check_zone(zone)
        if self._interfaces is not None and interface not in self._interfaces:
            log.warning("Interface '%s' does not exist", interface)
            return False
        self.zone.attach_interface(zone, interface)
        return True

    def add_special_interface_into_zone(self, interface, zone):
        if not checkSpecialInterface(interface):
            log.warning("%s", FirewallError(errors.INVALID_INTERFACE,
                                            interface))
            return False
        self.zone.attach_special_interface(zone, interface)
        return True

    def remove_interface_from_zone(self, interface, zone):
        self.zone.detach_interface(zone, interface)

    # masquerade

    def set_masquerade(self, enabled, zone=None):
        """Set masquerading of zone, of every known zone if zone is None"""
        zones = [ zone ] if zone is not None else self.catalog.known_zones()
        for _zone in zones:
            self.zone.set_masquerade(_zone, bool(enabled))

    def get_masquerade(self, zone=None):
        if zone is not None:
            return self.zone.query_masquerade(zone)
        return all(self.zone.query_masquerade(_zone)
                   for _zone in self.catalog.known_zones())

    # logging, the settings are global, zone is accepted for compatibility

    def get_logging_settings(self, zone=None):
        return self._log_denied

    def set_logging_settings(self, zone, value):
        if value not in config.LOG_DENIED_VALUES:
            raise FirewallError(
                errors.INVALID_VALUE,
                "'%s', choose from '%s'"
                % (value, "','".join(config.LOG_DENIED_VALUES)),
            )
        if value != self._log_denied:
            self._log_denied = value
            self._log_denied_modified = True

    def get_ignore_logging_broadcast(self, zone=None):
        return self._ignore_logging_broadcast

    def set_ignore_logging_broadcast(self, zone, value):
        if value not in config.YES_NO_VALUES:
            raise FirewallError(
                errors.INVALID_VALUE,
                "'%s', choose from '%s'"
                % (value, "','".join(config.YES_NO_VALUES)),
            )
        self._ignore_logging_broadcast = value

    def is_log_denied_modified(self):
        return self._log_denied_modified
