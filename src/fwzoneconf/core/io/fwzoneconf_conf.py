# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

"""Session configuration file

A key=value file like firewalld.conf selecting the backend and how the
engine writes to it. Lines starting with '#' or ';' are comments.
"""

__all__ = [ "KeyType", "BoolKey", "EnumKey", "valid_keys",
            "fwzoneconf_conf" ]

from fwzoneconf import config
from fwzoneconf import errors
from fwzoneconf.core.logger import log
from fwzoneconf.errors import FirewallError
from fwzoneconf.functions import str_to_bool


class KeyType(object):
    """String key, the value may not be empty"""
    key_type = str

    def __init__(self, key, default):
        self.key = key
        self._default = default

    def _check(self, value):
        if not isinstance(value, str) or not value.strip():
            raise ValueError("empty value")
        return value.strip()

    @property
    def default(self):
        return self.normalize(self._default)

    def get_as(self, value, as_type):
        if as_type is bool and self.key_type is bool:
            return str_to_bool(value)
        raise ValueError("%s can not be requested as %s" % \
                         (self.key, as_type.__name__))

    def default_as(self, as_type):
        return self.get_as(self.default, as_type)

    def normalize(self, value, strict=True, log_warn=True):
        """Value in its canonical file form

        Invalid values raise INVALID_VALUE if strict, else the default is
        used instead.
        """
        try:
            return self._check(value)
        except ValueError as msg:
            if strict:
                raise FirewallError(errors.INVALID_VALUE,
                                    "'%s' for %s" % (value, self.key))
            default = self._check(self._default)
            if log_warn and value is not None:
                log.warning("%s: %s, using default value '%s'", self.key,
                            msg, default)
            return default


class BoolKey(KeyType):
    key_type = bool

    def _check(self, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("empty value")
        return "yes" if str_to_bool(value, on_default=None) else "no"


class EnumKey(KeyType):
    def __init__(self, key, default, values):
        super(EnumKey, self).__init__(key, default)
        self.values = tuple(values)

    def _check(self, value):
        # enums are lower case without whitespace
        if isinstance(value, str) and value.strip().lower() in self.values:
            return value.strip().lower()
        raise ValueError("'%s' is not one of '%s'" % \
                         (value, "','".join(self.values)))


valid_keys = { t.key: t for t in [
    EnumKey("Backend", config.FALLBACK_BACKEND, config.BACKEND_VALUES),
    KeyType("FirewallCmd", config.FALLBACK_FIREWALL_CMD),
    BoolKey("Permanent", config.FALLBACK_PERMANENT),
    BoolKey("ReloadAfterWrite", config.FALLBACK_RELOAD_AFTER_WRITE),
    EnumKey("LogDenied", config.FALLBACK_LOG_DENIED,
            config.LOG_DENIED_VALUES),
    BoolKey("WarnUnknownKeys", config.FALLBACK_WARN_UNKNOWN_KEYS),
] }


def _split(line):
    """(key, value) of a line, None for comments and empty lines"""
    line = line.strip()
    if not line or line[0] in "#;":
        return None
    pair = [ x.strip() for x in line.split("=") ]
    if len(pair) != 2:
        raise ValueError("Invalid option definition")
    return tuple(pair)


class fwzoneconf_conf(object):
    def __init__(self, filename=config.FWZONECONF_CONF):
        self.filename = filename
        self._config = { }

    def __str__(self):
        return "\n".join("%s=%s" % item for item in self._config.items())

    def clear(self):
        self._config = { }

    def cleanup(self):
        self._config.clear()

    def get(self, key, as_type=None):
        value = self._config.get(key)
        if as_type is None:
            return value
        return valid_keys[key].get_as(value, as_type)

    def set(self, key, value):
        if key not in valid_keys:
            raise FirewallError(errors.INVALID_OPTION, key)
        self._config[key] = valid_keys[key].normalize(value, log_warn=False)
        return self._config[key]

    def set_defaults(self):
        for keytype in valid_keys.values():
            self._config[keytype.key] = keytype.default

    def backend_options(self):
        """Name and create_backend() arguments of the configured backend"""
        name = self.get("Backend")
        kwargs = { "permanent": self.get("Permanent", bool) }
        if name == "firewall-cmd":
            kwargs["command"] = self.get("FirewallCmd")
        return (name, kwargs)

    def read(self):
        self.clear()
        try:
            with open(self.filename, "r") as f:
                lines = f.readlines()
        except OSError as msg:
            log.error("Failed to load '%s': %s", self.filename, msg)
            self.set_defaults()
            raise

        for (lineno, line) in enumerate(lines, 1):
            try:
                pair = _split(line)
            except ValueError as msg:
                log.error("%s:%d: %s: '%s'", self.filename, lineno, msg,
                          line.strip())
                continue
            if pair is None:
                continue
            (key, value) = pair
            if key not in valid_keys:
                log.error("%s:%d: Invalid option '%s'", self.filename,
                          lineno, key)
            elif not value:
                log.error("%s:%d: Missing value for '%s'", self.filename,
                          lineno, key)
            elif key in self._config:
                log.error("%s:%d: Duplicate option '%s'", self.filename,
                          lineno, key)
            else:
                self._config[key] = value

        for keytype in valid_keys.values():
            self._config[keytype.key] = \
                keytype.normalize(self._config.get(keytype.key), strict=False)
