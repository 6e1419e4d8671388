# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

from fwzoneconf.core.base import BUILTIN_ZONES, LEGACY_ZONES
from fwzoneconf.core.logger import log
from fwzoneconf.errors import UnknownZoneError


class ZoneCatalog(object):
    """Known zones, their full names and SuSEfirewall2 aliases

    The catalog is filled once, zones reported by the backend that are not
    builtin are known by their own name.
    """

    def __init__(self, extra_zones=()):
        self._zones = dict(BUILTIN_ZONES)
        self._legacy = dict(LEGACY_ZONES)
        for zone in extra_zones:
            if zone not in self._zones:
                log.debug1("Adding custom zone '%s' to the catalog", zone)
                self._zones[zone] = zone

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.known_zones())

    def __contains__(self, zone):
        return self.is_known_zone(zone)

    def known_zones(self):
        return sorted(self._zones.keys())

    def is_known_zone(self, zone):
        return zone in self._zones

    def full_name(self, zone):
        if zone not in self._zones:
            raise UnknownZoneError(zone)
        return self._zones[zone]

    def canonical_name(self, legacy_name):
        return self._legacy.get(legacy_name)

    def check_zone(self, zone):
        """Return the catalog name of a zone given by catalog or legacy name"""
        if zone in self._zones:
            return zone
        _zone = self.canonical_name(zone)
        if _zone is None or _zone not in self._zones:
            raise UnknownZoneError(zone)
        return _zone
