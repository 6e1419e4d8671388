# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

__all__ = [ "ServiceCatalog" ]

from fwzoneconf.core import normalize
from fwzoneconf.core.logger import log
from fwzoneconf.errors import BackendCommandError


class ServiceCatalog(object):
    """Service definitions of the backend

    Service names and their ports and protocols are requested from the
    backend on first use and kept until cleanup() is called.
    """

    def __init__(self, backend):
        self._backend = backend
        self._services = None
        self._ports = { }
        self._protocols = { }
        self._descriptions = { }

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self._backend)

    def cleanup(self):
        self._services = None
        self._ports.clear()
        self._protocols.clear()
        self._descriptions.clear()

    def get_supported_services(self):
        if self._services is None:
            self._services = sorted(self._backend.get_services())
            log.debug1("%d services supported by the backend",
                       len(self._services))
        return list(self._services)

    def is_known_service(self, service):
        return normalize.canonicalize_service(service) in \
            self.get_supported_services()

    def _get_ports(self, service):
        service = normalize.canonicalize_service(service)
        if service not in self._ports:
            self._ports[service] = [
                normalize.canonicalize_port(port)
                for port in self._backend.get_service_ports(service) ]
        return self._ports[service]

    def get_needed_ports(self, service, protocol):
        return [ port for (port, proto) in self._get_ports(service)
                 if proto == protocol ]

    def get_needed_tcp_ports(self, service):
        return self.get_needed_ports(service, "tcp")

    def get_needed_udp_ports(self, service):
        return self.get_needed_ports(service, "udp")

    def get_needed_ip_protocols(self, service):
        service = normalize.canonicalize_service(service)
        if service not in self._protocols:
            self._protocols[service] = \
                self._backend.get_service_protocols(service)
        return list(self._protocols[service])

    def get_needed_ports_and_protocols(self, service):
        return {
            "tcp_ports": self.get_needed_tcp_ports(service),
            "udp_ports": self.get_needed_udp_ports(service),
            "ip_protocols": self.get_needed_ip_protocols(service),
        }

    def needs_protocol(self, service, protocol):
        """Whether the service needs ports of protocol or, for 'ip', any
        raw IP protocol"""
        if protocol == "ip":
            return len(self.get_needed_ip_protocols(service)) > 0
        return len(self.get_needed_ports(service, protocol)) > 0

    def get_description(self, service):
        service = normalize.canonicalize_service(service)
        if service not in self._descriptions:
            try:
                description = self._backend.get_service_description(service)
            except BackendCommandError as msg:
                log.debug1("Service '%s' has no description: %s", service,
                           msg)
                description = "Unknown description for %s" % service
            self._descriptions[service] = description
        return self._descriptions[service]
