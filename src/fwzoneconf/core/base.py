# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

"""Base zone settings"""

# zones firewalld ships with, and their full names
BUILTIN_ZONES = {
    "block": "Block Zone",
    "dmz": "Demilitarized Zone",
    "drop": "Drop Zone",
    "external": "External Zone",
    "home": "Home Zone",
    "internal": "Internal Zone",
    "public": "Public Zone",
    "trusted": "Trusted Zone",
    "work": "Work Zone",
}

# SuSEfirewall2 zone codes
LEGACY_ZONES = {
    "INT": "trusted",
    "EXT": "external",
    "DMZ": "dmz",
}
