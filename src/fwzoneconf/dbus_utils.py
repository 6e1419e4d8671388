# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

import dbus

from fwzoneconf.errors import FirewallError

# dbus scalar types and their python types, dbus.Boolean is an int
_SCALARS = (
    ((dbus.Boolean,), bool),
    ((dbus.String, dbus.ObjectPath), str),
    ((dbus.Byte, dbus.Int16, dbus.Int32, dbus.Int64,
      dbus.UInt16, dbus.UInt32, dbus.UInt64), int),
    ((dbus.Double,), float),
)


def dbus_to_python(obj, expected_type=None):
    """Convert a value returned by dbus-python into plain python types

    A TypeError is raised for unknown types and if the result is not an
    instance of expected_type.
    """
    python_obj = obj
    if obj is not None:
        for (dbus_types, _type) in _SCALARS:
            if isinstance(obj, dbus_types):
                python_obj = _type(obj)
                break
        else:
            if isinstance(obj, dbus.Array):
                python_obj = [ dbus_to_python(x) for x in obj ]
            elif isinstance(obj, dbus.Struct):
                python_obj = tuple(dbus_to_python(x) for x in obj)
            elif isinstance(obj, dbus.Dictionary):
                python_obj = { dbus_to_python(k): dbus_to_python(v)
                               for (k, v) in obj.items() }
            elif not isinstance(obj, (bool, str, bytes, int, float, list,
                                      tuple, dict)):
                raise TypeError("Unhandled %s" % repr(obj))

    if expected_type is not None and \
       not isinstance(python_obj, expected_type):
        raise TypeError("%s is %s, expected %s" % \
                        (python_obj, type(python_obj), expected_type))
    return python_obj


def dbus_ports_to_str(ports):
    """Port tuples or lists of the zone API as 'port/protocol' strings"""
    return [ "%s/%s" % (port, protocol)
             for (port, protocol) in dbus_to_python(ports, list) ]


def dbus_error_name(exception):
    """firewalld error name carried in a DBusException message

    firewalld raises its errors as 'NAME: detail' messages. None is returned
    for errors that are not firewalld errors, like a missing bus connection.
    """
    message = exception.get_dbus_message() or ""
    name = message.split(":", 1)[0].strip()
    if name in FirewallError.codes:
        return name
    return None
