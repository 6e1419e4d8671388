# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

__all__ = [ "firewallcmd" ]

from fwzoneconf import config
from fwzoneconf.core.backend import Backend
from fwzoneconf.core.logger import log
from fwzoneconf.core.prog import runProg
from fwzoneconf.errors import BackendCommandError
from fwzoneconf.functions import joinArgs

# firewall-cmd exit codes that are answers, not failures
EXIT_YES = 0
EXIT_NO = 1
EXIT_NO_ZONE = 2
EXIT_ALREADY_ENABLED = 11
EXIT_NOT_ENABLED = 12
EXIT_ALREADY_SET = 34
EXIT_NOT_RUNNING = 252


class firewallcmd(Backend):
    """Backend running firewall-cmd, one process per operation"""
    name = "firewall-cmd"

    def __init__(self, permanent=config.FALLBACK_PERMANENT, command=None):
        super(firewallcmd, self).__init__(permanent)
        self._command = command or config.COMMANDS["firewall-cmd"]

    def __run(self, args, answers=(EXIT_YES, EXIT_NO)):
        _args = [ "%s" % item for item in args ]
        log.debug2("%s: %s %s", self.__class__.__name__, self._command,
                   joinArgs(_args))
        (status, ret) = runProg(self._command, _args)
        if status not in answers:
            raise BackendCommandError("'%s %s' failed (%d): %s" % \
                                      (self._command, joinArgs(_args),
                                       status, ret.strip()))
        log.debug3("%s returned %d: %s", self._command, status, ret.strip())
        return (status, ret)

    def _permanent(self):
        if self.permanent:
            return [ "--permanent" ]
        return [ ]

    def _do(self, *args):
        (status, ret) = self.__run(list(args))
        return status == EXIT_YES

    def _list(self, *args):
        (status, ret) = self.__run(list(args), answers=(EXIT_YES,))
        return ret.split()

    def _zone(self, zone, *args):
        return self._permanent() + [ "--zone=%s" % zone ] + list(args)

    # state

    def is_running(self):
        (status, ret) = self.__run([ "--state" ],
                                   answers=(EXIT_YES, EXIT_NO,
                                            EXIT_NOT_RUNNING))
        return status == EXIT_YES

    def reload(self):
        return self._do("--reload")

    def complete_reload(self):
        return self._do("--complete-reload")

    def runtime_to_permanent(self):
        return self._do("--runtime-to-permanent")

    # zones

    def get_zones(self):
        return self._list(*(self._permanent() + [ "--get-zones" ]))

    def get_zone_of_interface(self, interface):
        args = self._permanent() + [ "--get-zone-of-interface=%s" % interface ]
        (status, ret) = self.__run(args, answers=(EXIT_YES, EXIT_NO,
                                                  EXIT_NO_ZONE))
        if status != EXIT_YES or not ret.strip():
            return None
        return ret.strip()

    def list_interfaces(self, zone):
        return self._list(*self._zone(zone, "--list-interfaces"))

    def add_interface(self, zone, interface):
        return self._do(*self._zone(zone, "--add-interface=%s" % interface))

    def remove_interface(self, zone, interface):
        return self._do(*self._zone(zone,
                                    "--remove-interface=%s" % interface))

    def list_services(self, zone):
        return self._list(*self._zone(zone, "--list-services"))

    def add_service(self, zone, service):
        return self._do(*self._zone(zone, "--add-service=%s" % service))

    def remove_service(self, zone, service):
        return self._do(*self._zone(zone, "--remove-service=%s" % service))

    def list_ports(self, zone):
        return self._list(*self._zone(zone, "--list-ports"))

    def add_port(self, zone, port):
        return self._do(*self._zone(zone, "--add-port=%s" % port))

    def remove_port(self, zone, port):
        return self._do(*self._zone(zone, "--remove-port=%s" % port))

    def list_protocols(self, zone):
        return self._list(*self._zone(zone, "--list-protocols"))

    def add_protocol(self, zone, protocol):
        return self._do(*self._zone(zone, "--add-protocol=%s" % protocol))

    def remove_protocol(self, zone, protocol):
        return self._do(*self._zone(zone, "--remove-protocol=%s" % protocol))

    def query_masquerade(self, zone):
        return self._do(*self._zone(zone, "--query-masquerade"))

    def _toggle(self, *args):
        # "already enabled" and "not enabled" answer the wanted state
        (status, ret) = self.__run(list(args),
                                   answers=(EXIT_YES, EXIT_NO,
                                            EXIT_ALREADY_ENABLED,
                                            EXIT_NOT_ENABLED))
        return status != EXIT_NO

    def add_masquerade(self, zone):
        return self._toggle(*self._zone(zone, "--add-masquerade"))

    def remove_masquerade(self, zone):
        return self._toggle(*self._zone(zone, "--remove-masquerade"))

    # services, service definitions are only accessible permanently

    def get_services(self):
        return self._list("--permanent", "--get-services")

    def get_service_ports(self, service):
        return self._list("--permanent", "--service=%s" % service,
                          "--get-ports")

    def get_service_protocols(self, service):
        return self._list("--permanent", "--service=%s" % service,
                          "--get-protocols")

    def get_service_description(self, service):
        try:
            (status, ret) = self.__run([ "--permanent",
                                         "--service=%s" % service,
                                         "--get-short" ],
                                       answers=(EXIT_YES,))
        except BackendCommandError as msg:
            log.debug1("No description for service '%s': %s", service, msg)
            return "Unknown description for %s" % service
        return ret.strip()

    # logging

    def get_log_denied(self):
        (status, ret) = self.__run([ "--get-log-denied" ],
                                   answers=(EXIT_YES,))
        return ret.strip()

    def set_log_denied(self, value):
        (status, ret) = self.__run([ "--set-log-denied=%s" % value ],
                                   answers=(EXIT_YES, EXIT_NO,
                                            EXIT_ALREADY_SET))
        return status != EXIT_NO
