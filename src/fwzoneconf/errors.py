# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

ALREADY_ENABLED     =   11
NOT_ENABLED         =   12
COMMAND_FAILED      =   13
ZONE_ALREADY_SET    =   16
UNKNOWN_INTERFACE   =   17
ZONE_CONFLICT       =   18
PARSE_ERROR         =   28
ALREADY_SET         =   34
DBUS_ERROR          =   36

INVALID_SERVICE     =  101
INVALID_PORT        =  102
INVALID_PROTOCOL    =  103
INVALID_INTERFACE   =  104
INVALID_ZONE        =  112
INVALID_VALUE       =  114
INVALID_TYPE        =  119
INVALID_SETTING     =  120
INVALID_OPTION      =  137

MISSING_PORT        =  202
MISSING_PROTOCOL    =  203
MISSING_NAME        =  205

NOT_RUNNING         =  252
BUG                 =  253
UNKNOWN_ERROR       =  254

import sys

class FirewallError(Exception):
    def __init__(self, code, msg=None):
        super(FirewallError, self).__init__(code, msg)
        self.code = code
        self.msg = msg

    def __repr__(self):
        return '%s(%r, %r)' % (self.__class__.__name__, self.code, self.msg)

    def __str__(self):
        if self.msg:
            return "%s: %s" % (self.errors[self.code], self.msg)
        return self.errors[self.code]

    def get_code(msg):
        if ":" in msg:
            idx = msg.index(":")
            ecode = msg[:idx]
        else:
            ecode = msg

        try:
            code = FirewallError.codes[ecode]
        except KeyError:
            code = UNKNOWN_ERROR

        return code

    get_code = staticmethod(get_code)


class UnknownZoneError(FirewallError):
    """Zone name is not part of the zone catalog."""
    def __init__(self, zone):
        super(UnknownZoneError, self).__init__(INVALID_ZONE, zone)
        self.zone = zone


class ServiceNotFoundError(FirewallError):
    """Service name is not known to the running backend."""
    def __init__(self, service):
        super(ServiceNotFoundError, self).__init__(
            INVALID_SERVICE, "Service with name '%s' does not exist" % service)
        self.service = service


class BackendCommandError(FirewallError):
    """The backend call itself failed, its result can not be interpreted."""
    def __init__(self, msg=None):
        super(BackendCommandError, self).__init__(COMMAND_FAILED, msg)


class BugError(FirewallError):
    def __init__(self, msg=None):
        super(BugError, self).__init__(BUG, msg)


mod = sys.modules[FirewallError.__module__]
FirewallError.errors = { getattr(mod,varname) : varname
                         for varname in dir(mod)
                         if not varname.startswith("_") and \
                         type(getattr(mod,varname)) == int }
FirewallError.codes =  { FirewallError.errors[code] : code
                         for code in FirewallError.errors }
