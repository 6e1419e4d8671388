# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

__all__ = [ "dbusapi" ]

import functools

import dbus

from fwzoneconf import config
from fwzoneconf.core.backend import Backend
from fwzoneconf.core.logger import log
from fwzoneconf.dbus_utils import dbus_to_python, dbus_ports_to_str, \
    dbus_error_name
from fwzoneconf.errors import BackendCommandError


def handle_exceptions(func):
    """Decorator mapping D-Bus errors to backend answers

    firewalld errors that only report that there is nothing to do are a
    negative answer, every other D-Bus error is a failed backend command.
    """
    @functools.wraps(func)
    def _impl(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except dbus.exceptions.DBusException as e:
            name = dbus_error_name(e)
            if name in config.dbus.DBUS_NOOP_ERRORS:
                log.debug2("%s%s: %s", func.__name__, args,
                           e.get_dbus_message())
                return False
            raise BackendCommandError("%s%s failed: %s" % \
                                      (func.__name__, args,
                                       e.get_dbus_message() or str(e)))
    return _impl


class dbusapi(Backend):
    """Backend using the firewalld D-Bus API

    In permanent mode zones are changed through the configuration objects
    of firewalld, else through the runtime zone interface.
    """
    name = "dbus"

    def __init__(self, permanent=config.FALLBACK_PERMANENT, bus=None):
        super(dbusapi, self).__init__(permanent)
        self._bus = bus
        self._fw = None
        self._fw_zone = None
        self._fw_config = None
        self._fw_properties = None

    def _connect(self):
        if self._fw is not None:
            return
        if self._bus is None:
            try:
                self._bus = dbus.SystemBus()
            except dbus.exceptions.DBusException as e:
                raise BackendCommandError("Not able to connect to the system "
                                          "bus: %s" % e.get_dbus_message())
        log.debug2("%s: connecting to %s", self.__class__.__name__,
                   config.dbus.DBUS_INTERFACE)
        fw_obj = self._bus.get_object(config.dbus.DBUS_INTERFACE,
                                      config.dbus.DBUS_PATH)
        self._fw = dbus.Interface(fw_obj,
                                  dbus_interface=config.dbus.DBUS_INTERFACE)
        self._fw_zone = dbus.Interface(
            fw_obj, dbus_interface=config.dbus.DBUS_INTERFACE_ZONE)
        self._fw_properties = dbus.Interface(
            fw_obj, dbus_interface="org.freedesktop.DBus.Properties")
        config_obj = self._bus.get_object(config.dbus.DBUS_INTERFACE,
                                          config.dbus.DBUS_PATH_CONFIG)
        self._fw_config = dbus.Interface(
            config_obj, dbus_interface=config.dbus.DBUS_INTERFACE_CONFIG)

    def _config_object(self, path, interface):
        obj = self._bus.get_object(config.dbus.DBUS_INTERFACE, path)
        return dbus.Interface(obj, dbus_interface=interface)

    def _config_zone(self, zone):
        self._connect()
        path = dbus_to_python(self._fw_config.getZoneByName(zone))
        return self._config_object(path, config.dbus.DBUS_INTERFACE_CONFIG_ZONE)

    def _config_service(self, service):
        self._connect()
        path = dbus_to_python(self._fw_config.getServiceByName(service))
        return self._config_object(path,
                                   config.dbus.DBUS_INTERFACE_CONFIG_SERVICE)

    def _runtime(self):
        self._connect()
        return self._fw_zone

    # state

    def is_running(self):
        try:
            self._connect()
            state = self._fw_properties.Get(config.dbus.DBUS_INTERFACE,
                                            "state")
        except dbus.exceptions.DBusException as e:
            log.debug1("firewalld is not reachable: %s", e.get_dbus_message())
            return False
        except BackendCommandError as msg:
            log.debug1("%s", msg)
            return False
        return dbus_to_python(state) == "RUNNING"

    @handle_exceptions
    def reload(self):
        self._connect()
        self._fw.reload()
        return True

    @handle_exceptions
    def complete_reload(self):
        self._connect()
        self._fw.completeReload()
        return True

    @handle_exceptions
    def runtime_to_permanent(self):
        self._connect()
        self._fw.runtimeToPermanent()
        return True

    # zones

    @handle_exceptions
    def get_zones(self):
        self._connect()
        if self.permanent:
            return dbus_to_python(self._fw_config.getZoneNames(), list)
        return dbus_to_python(self._fw_zone.getZones(), list)

    @handle_exceptions
    def get_zone_of_interface(self, interface):
        self._connect()
        if self.permanent:
            zone = self._fw_config.getZoneOfInterface(interface)
        else:
            zone = self._fw_zone.getZoneOfInterface(interface)
        return dbus_to_python(zone) or None

    @handle_exceptions
    def list_interfaces(self, zone):
        if self.permanent:
            return dbus_to_python(self._config_zone(zone).getInterfaces(),
                                  list)
        return dbus_to_python(self._runtime().getInterfaces(zone), list)

    @handle_exceptions
    def add_interface(self, zone, interface):
        if self.permanent:
            self._config_zone(zone).addInterface(interface)
        else:
            self._runtime().addInterface(zone, interface)
        return True

    @handle_exceptions
    def remove_interface(self, zone, interface):
        if self.permanent:
            self._config_zone(zone).removeInterface(interface)
        else:
            self._runtime().removeInterface(zone, interface)
        return True

    @handle_exceptions
    def list_services(self, zone):
        if self.permanent:
            return dbus_to_python(self._config_zone(zone).getServices(), list)
        return dbus_to_python(self._runtime().getServices(zone), list)

    @handle_exceptions
    def add_service(self, zone, service):
        if self.permanent:
            self._config_zone(zone).addService(service)
        else:
            self._runtime().addService(zone, service, 0)
        return True

    @handle_exceptions
    def remove_service(self, zone, service):
        if self.permanent:
            self._config_zone(zone).removeService(service)
        else:
            self._runtime().removeService(zone, service)
        return True

    @handle_exceptions
    def list_ports(self, zone):
        if self.permanent:
            return dbus_ports_to_str(self._config_zone(zone).getPorts())
        return dbus_ports_to_str(self._runtime().getPorts(zone))

    @handle_exceptions
    def add_port(self, zone, port):
        (_port, protocol) = port.split("/", 1)
        if self.permanent:
            self._config_zone(zone).addPort(_port, protocol)
        else:
            self._runtime().addPort(zone, _port, protocol, 0)
        return True

    @handle_exceptions
    def remove_port(self, zone, port):
        (_port, protocol) = port.split("/", 1)
        if self.permanent:
            self._config_zone(zone).removePort(_port, protocol)
        else:
            self._runtime().removePort(zone, _port, protocol)
        return True

    @handle_exceptions
    def list_protocols(self, zone):
        if self.permanent:
            return dbus_to_python(self._config_zone(zone).getProtocols(),
                                  list)
        return dbus_to_python(self._runtime().getProtocols(zone), list)

    @handle_exceptions
    def add_protocol(self, zone, protocol):
        if self.permanent:
            self._config_zone(zone).addProtocol(protocol)
        else:
            self._runtime().addProtocol(zone, protocol, 0)
        return True

    @handle_exceptions
    def remove_protocol(self, zone, protocol):
        if self.permanent:
            self._config_zone(zone).removeProtocol(protocol)
        else:
            self._runtime().removeProtocol(zone, protocol)
        return True

    @handle_exceptions
    def query_masquerade(self, zone):
        if self.permanent:
            return dbus_to_python(self._config_zone(zone).queryMasquerade(),
                                  bool)
        return dbus_to_python(self._runtime().queryMasquerade(zone), bool)

    @handle_exceptions
    def add_masquerade(self, zone):
        if self.permanent:
            self._config_zone(zone).addMasquerade()
        else:
            self._runtime().addMasquerade(zone, 0)
        return True

    @handle_exceptions
    def remove_masquerade(self, zone):
        if self.permanent:
            self._config_zone(zone).removeMasquerade()
        else:
            self._runtime().removeMasquerade(zone)
        return True

    # services

    @handle_exceptions
    def get_services(self):
        self._connect()
        return dbus_to_python(self._fw_config.getServiceNames(), list)

    @handle_exceptions
    def get_service_ports(self, service):
        return dbus_ports_to_str(self._config_service(service).getPorts())

    @handle_exceptions
    def get_service_protocols(self, service):
        return dbus_to_python(self._config_service(service).getProtocols(),
                              list)

    def get_service_description(self, service):
        try:
            short = self._config_service(service).getShort()
        except dbus.exceptions.DBusException as e:
            log.debug1("No description for service '%s': %s", service,
                       e.get_dbus_message())
            return "Unknown description for %s" % service
        return dbus_to_python(short, str)

    # logging

    @handle_exceptions
    def get_log_denied(self):
        self._connect()
        return dbus_to_python(self._fw.getLogDenied(), str)

    @handle_exceptions
    def set_log_denied(self, value):
        self._connect()
        if dbus_to_python(self._fw.getLogDenied(), str) == value:
            return True
        self._fw.setLogDenied(value)
        return True
