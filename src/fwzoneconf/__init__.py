# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

__version__ = "0.4.0"
