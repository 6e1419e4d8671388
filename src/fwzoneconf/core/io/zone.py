# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

__all__ = [ "Zone" ]

import copy

from fwzoneconf import config
from fwzoneconf.core import normalize
from fwzoneconf.core.logger import log
from fwzoneconf.functions import checkInterface, checkSpecialInterface, \
    checkServiceName, uniqify
from fwzoneconf import errors
from fwzoneconf.errors import FirewallError


class Zone(object):
    """ Zone class

    Settings of one zone as known to the configuration session. Ports are
    kept as (port, protocol) tuples with canonical 'low-high' ranges,
    services without the 'service:' prefix.
    """

    IMPORT_EXPORT_STRUCTURE = (
        ( "interfaces", [ "" ] ),                      # as
        ( "masquerade", False ),                       # b
        ( "ports", [ "" ] ),                           # as, port/protocol
        ( "protocols", [ "" ] ),                       # as
        ( "services", [ "" ] ),                        # as
        )

    def __init__(self, name=""):
        self.name = name
        self.interfaces = [ ]
        self.special_interfaces = [ ]
        self.services = [ ]
        self.ports = [ ]
        self.protocols = [ ]
        self.masquerade = False
        self.modified = set()

    def __repr__(self):
        return "%s(%r, interfaces=%r, services=%r, ports=%r, " \
            "protocols=%r, masquerade=%r, modified=%r)" % \
            (self.__class__.__name__, self.name, self.get_all_interfaces(),
             self.services, self.ports, self.protocols, self.masquerade,
             sorted(self.modified))

    def cleanup(self):
        del self.interfaces[:]
        del self.special_interfaces[:]
        del self.services[:]
        del self.ports[:]
        del self.protocols[:]
        self.masquerade = False
        self.modified.clear()

    def get_all_interfaces(self):
        return self.interfaces + self.special_interfaces

    def ports_for(self, protocol):
        return [ port for (port, proto) in self.ports if proto == protocol ]

    def export_config_dict(self):
        conf = { }
        conf["interfaces"] = self.get_all_interfaces()
        conf["masquerade"] = self.masquerade
        conf["ports"] = [ normalize.port_to_str(port, proto)
                          for (port, proto) in self.ports ]
        conf["protocols"] = copy.deepcopy(self.protocols)
        conf["services"] = copy.deepcopy(self.services)
        conf["modified"] = sorted(self.modified)
        return conf

    @classmethod
    def check_config_dict(cls, conf, strict=False, log_warn=True):
        """Validate and canonicalize imported zone settings

        Unknown keys and invalid values raise a FirewallError if strict is
        set, else they are logged (as warnings with log_warn) and left out
        of the result. Interfaces are split into plain and special (pattern)
        interfaces.
        """
        type_formats = dict(cls.IMPORT_EXPORT_STRUCTURE)
        settings = { }
        for key in conf:
            if key not in type_formats:
                cls._invalid(strict, log_warn, errors.INVALID_OPTION,
                             "option '%s' is not valid" % key)
                continue
            try:
                cls._check_config_structure(conf[key], type_formats[key])
            except FirewallError as error:
                if strict:
                    raise
                cls._report(log_warn, "Zone option '%s' ignored: %s", key,
                            error)
                continue
            if key == "masquerade":
                settings[key] = conf[key]
                continue

            values = [ ]
            for item in conf[key]:
                try:
                    values.append(cls._check_item(key, item))
                except FirewallError as error:
                    if strict:
                        raise
                    cls._report(log_warn, "Zone option '%s': value ignored: %s",
                                key, error)
            values = uniqify(values)
            if key == "interfaces":
                settings["interfaces"] = [ x for x in values
                                           if not checkSpecialInterface(x) ]
                settings["special_interfaces"] = \
                    [ x for x in values if checkSpecialInterface(x) ]
            else:
                settings[key] = values
        return settings

    @staticmethod
    def _invalid(strict, log_warn, code, msg):
        if strict:
            raise FirewallError(code, msg)
        Zone._report(log_warn, "%s", msg)

    @staticmethod
    def _report(log_warn, msg, *args):
        if log_warn:
            log.warning(msg, *args)
        else:
            log.debug1(msg, *args)

    @staticmethod
    def _check_item(key, item):
        if key == "interfaces":
            if not checkInterface(item):
                raise FirewallError(errors.INVALID_INTERFACE, item)
            return item
        if key == "services":
            service = normalize.canonicalize_service(item)
            if not checkServiceName(service):
                raise FirewallError(errors.INVALID_SERVICE, item)
            return service
        if key == "ports":
            return normalize.canonicalize_port(item)
        if key == "protocols":
            return normalize.canonicalize_protocol(item)
        raise errors.BugError("no item check for '%s'" % key)

    @staticmethod
    def _check_config_structure(conf, structure):
        if not isinstance(conf, type(structure)):
            raise FirewallError(errors.INVALID_TYPE,
                                "'%s' not of type %s, but %s" % \
                                (conf, type(structure), type(conf)))
        if isinstance(structure, list):
            for x in conf:
                if not isinstance(x, type(structure[0])):
                    raise FirewallError(errors.INVALID_TYPE,
                                        "'%s' not of type %s, but %s" % \
                                        (x, type(structure[0]), type(x)))

    @staticmethod
    def attribute_of(setting):
        """Dirty tag of a zone setting"""
        if setting == "special_interfaces":
            return "interfaces"
        if setting not in config.ZONE_ATTRIBUTES:
            raise errors.BugError("'%s' is not a zone attribute" % setting)
        return setting
