# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

__all__ = [ "LogTarget", "FileLog", "Logger", "log" ]

import fcntl
import fnmatch
import inspect
import os
import sys
import time
import traceback


class LogTarget(object):
    """ Abstract class for logging targets. """
    def __init__(self):
        self.fd = None

    def write(self, data, level, logger, is_debug=0):
        raise NotImplementedError("LogTarget.write is an abstract method")

    def flush(self):
        raise NotImplementedError("LogTarget.flush is an abstract method")

    def close(self):
        raise NotImplementedError("LogTarget.close is an abstract method")


class _StreamLog(LogTarget):
    # the stream is looked up on every write, replaced streams are honoured
    def __init__(self, stream):
        LogTarget.__init__(self)
        self.stream = stream

    def write(self, data, level, logger, is_debug=0):
        fd = getattr(sys, self.stream)
        fd.write(data)
        fd.flush()

    def flush(self):
        getattr(sys, self.stream).flush()

    def close(self):
        self.flush()


class FileLog(LogTarget):
    """ Log into a file, opened on the first write. """
    def __init__(self, filename, mode="w"):
        LogTarget.__init__(self)
        self.filename = filename
        self.mode = mode

    def open(self):
        if self.fd:
            return
        flags = os.O_CREAT | os.O_WRONLY
        if self.mode.startswith("a"):
            flags |= os.O_APPEND
        else:
            flags |= os.O_TRUNC
        fd = os.open(self.filename, flags, 0o640)
        fcntl.fcntl(fd, fcntl.F_SETFD, fcntl.FD_CLOEXEC)
        self.fd = os.fdopen(fd, self.mode)

    def write(self, data, level, logger, is_debug=0):
        self.open()
        self.fd.write(data)
        self.fd.flush()

    def flush(self):
        if self.fd:
            self.fd.flush()

    def close(self):
        if self.fd:
            self.fd.close()
            self.fd = None


class Logger(object):
    r"""
    Leveled logger with printf style messages.

    Levels: FATAL, ERROR, WARNING, INFO1..INFOn and DEBUG1..DEBUGm. Levels
    are set per domain, a domain is a module name prefix or an fnmatch
    pattern on "module.function", "*" matches everything. Each level has a
    list of (domain, target, format) entries.

    Format keys: date, file, line, module, function, domain, label, level
    and message.

        from fwzoneconf.core.logger import log
        log.setDebugLogLevel(log.DEBUG2)
        log.debug2("running '%s'", command)
    """

    ALL       = -5
    NOTHING   = -4
    FATAL     = -3
    TRACEBACK = -2
    ERROR     = -1
    WARNING   =  0

    stdout = _StreamLog("stdout")
    stderr = _StreamLog("stderr")

    def __init__(self, info_max=5, debug_max=10):
        if info_max < 1:
            raise ValueError("Logger: info_max %d is too low" % info_max)
        if debug_max < 0:
            raise ValueError("Logger: debug_max %d is too low" % debug_max)

        self.NO_INFO = self.WARNING
        self.INFO_MAX = info_max
        self.NO_DEBUG = 0
        self.DEBUG_MAX = debug_max

        # index 0: info, index 1: debug
        self._levels = ({ }, { })
        self._targets = ({ }, { })
        self._labels = ({ self.FATAL: "FATAL ERROR: ", self.TRACEBACK: "",
                          self.ERROR: "ERROR: ", self.WARNING: "WARNING: " },
                        { })
        self._format = "%(label)s%(message)s"
        self._date_format = "%d %b %Y %H:%M:%S"

        for level in range(1, self.INFO_MAX + 1):
            setattr(self, "INFO%d" % level, level)
            setattr(self, "info%d" % level, self._bind(self.info, level))
        for level in range(1, self.DEBUG_MAX + 1):
            setattr(self, "DEBUG%d" % level, level)
            self._labels[1][level] = "DEBUG%d: " % level
            setattr(self, "debug%d" % level, self._bind(self.debug, level))

        self.setInfoLogLevel(self.INFO1)
        self.setDebugLogLevel(self.NO_DEBUG)
        self.setInfoLogging("*", self.stderr, [ self.FATAL, self.TRACEBACK,
                                                self.ERROR, self.WARNING ])
        self.setInfoLogging("*", self.stdout,
                            list(range(1, self.INFO_MAX + 1)))
        self.setDebugLogging("*", self.stdout)

    @staticmethod
    def _bind(func, level):
        return lambda message, *args, **kwargs: \
            func(level, message, *args, **kwargs)

    def close(self):
        for targets in self._targets:
            for entries in targets.values():
                for (domain, target, fmt) in entries:
                    target.close()

    # levels

    def getInfoLogLevel(self, domain="*"):
        return self._levels[0].get(domain, self.NOTHING)

    def setInfoLogLevel(self, level, domain="*"):
        """ Set log level, clamped to [NOTHING .. INFO_MAX] """
        self._checkDomain(domain)
        self._levels[0][domain] = max(self.NOTHING, min(level, self.INFO_MAX))

    def getDebugLogLevel(self, domain="*"):
        return self._levels[1].get(domain, self.NO_DEBUG)

    def setDebugLogLevel(self, level, domain="*"):
        """ Set debug level, clamped to [NO_DEBUG .. DEBUG_MAX] """
        self._checkDomain(domain)
        self._levels[1][domain] = max(self.NO_DEBUG,
                                      min(level, self.DEBUG_MAX))

    def getFormat(self):
        return self._format

    def setFormat(self, _format):
        self._format = _format

    def setDateFormat(self, _format):
        self._date_format = _format

    # targets

    def setInfoLogging(self, domain, target, level=ALL, fmt=None):
        """ Replace the targets of the info levels. """
        self._setTargets(0, domain, target, level, fmt, replace=True)

    def setDebugLogging(self, domain, target, level=ALL, fmt=None):
        """ Replace the targets of the debug levels. """
        self._setTargets(1, domain, target, level, fmt, replace=True)

    def addInfoLogging(self, domain, target, level=ALL, fmt=None):
        self._setTargets(0, domain, target, level, fmt)

    def addDebugLogging(self, domain, target, level=ALL, fmt=None):
        self._setTargets(1, domain, target, level, fmt)

    def delInfoLogging(self, domain, target, level=ALL, fmt=None):
        self._delTargets(0, domain, target, level, fmt)

    def delDebugLogging(self, domain, target, level=ALL, fmt=None):
        self._delTargets(1, domain, target, level, fmt)

    # log functions

    def fatal(self, _format, *args, **kwargs):
        self._log(self.FATAL, 0, _format, args, kwargs)

    def error(self, _format, *args, **kwargs):
        self._log(self.ERROR, 0, _format, args, kwargs)

    def warning(self, _format, *args, **kwargs):
        self._log(self.WARNING, 0, _format, args, kwargs)

    def info(self, level, _format, *args, **kwargs):
        self._checkLevel(level, 1, self.INFO_MAX)
        self._log(level + self.NO_INFO, 0, _format, args, kwargs)

    def debug(self, level, _format, *args, **kwargs):
        self._checkLevel(level, 1, self.DEBUG_MAX)
        self._log(level, 1, _format, args, kwargs)

    def exception(self):
        """ Log the traceback of the handled exception at error level """
        self._log(self.TRACEBACK, 0, traceback.format_exc(), (),
                  { "nofmt": 1, "nl": 0 })

    # internals

    @staticmethod
    def _checkLevel(level, min_level, max_level):
        if level < min_level or level > max_level:
            raise ValueError("Level %d out of range, should be [%d..%d]." % \
                             (level, min_level, max_level))

    @staticmethod
    def _checkDomain(domain):
        if not domain:
            raise ValueError("Domain '%s' is not valid." % domain)

    def _expand(self, is_debug, level):
        if is_debug:
            (min_level, max_level) = (1, self.DEBUG_MAX)
        else:
            (min_level, max_level) = (self.FATAL, self.INFO_MAX)
        if level == self.ALL:
            return list(range(min_level, max_level + 1))
        levels = level if isinstance(level, (list, tuple)) else [ level ]
        for _level in levels:
            self._checkLevel(_level, min_level, max_level)
        return levels

    def _setTargets(self, is_debug, domain, target, level, fmt,
                    replace=False):
        self._checkDomain(domain)
        targets = target if isinstance(target, (list, tuple)) else [ target ]
        for _target in targets:
            if not isinstance(_target, LogTarget):
                raise ValueError("'%s' is no valid logging target." % \
                                 _target.__class__.__name__)
        entries = [ (domain, _target, fmt) for _target in targets ]
        for _level in self._expand(is_debug, level):
            if replace:
                self._targets[is_debug][_level] = list(entries)
            else:
                self._targets[is_debug].setdefault(_level, [ ]).extend(entries)

    def _delTargets(self, is_debug, domain, target, level, fmt):
        for _level in self._expand(is_debug, level):
            entries = self._targets[is_debug].get(_level, [ ])
            if (domain, target, fmt) in entries:
                entries.remove((domain, target, fmt))
            elif level != self.ALL:
                raise ValueError("No logging for level %d and domain %s." % \
                                 (_level, domain))
            if not entries:
                self._targets[is_debug].pop(_level, None)

    @staticmethod
    def _matches(domain, module, full_domain):
        return domain == "*" or \
            (module + ".").startswith(domain + ".") or \
            fnmatch.fnmatchcase(full_domain, domain)

    def _log(self, level, is_debug, _format, args, kwargs):
        for key in kwargs:
            if key not in ("nl", "fmt", "nofmt"):
                raise ValueError("Key '%s' is not allowed as argument for "
                                 "logging." % key)
        entries = self._targets[is_debug].get(level)
        if not entries:
            return

        # first frame outside of this module
        f = inspect.currentframe()
        while f.f_back and f.f_globals["__name__"] == __name__:
            f = f.f_back
        module = f.f_globals["__name__"]
        full_domain = "%s.%s" % (module, f.f_code.co_name)

        # tracebacks are logged whenever errors are
        check_level = self.ERROR if level == self.TRACEBACK else level
        if not any(max_level >= check_level and
                   self._matches(domain, module, full_domain)
                   for (domain, max_level) in self._levels[is_debug].items()):
            return

        message = _format % args if args else _format
        values = { "date": time.strftime(self._date_format, time.localtime()),
                   "file": f.f_code.co_filename,
                   "line": f.f_lineno,
                   "module": module,
                   "function": f.f_code.co_name,
                   "domain": full_domain,
                   "label": self._labels[is_debug].get(level, ""),
                   "level": level,
                   "message": message }

        used = [ ]
        for (domain, target, fmt) in entries:
            if target in used or \
               not self._matches(domain, module, full_domain):
                continue
            if kwargs.get("nofmt", 0):
                target.write(message, level, self, is_debug)
            else:
                fmt = kwargs.get("fmt", fmt or self._format)
                target.write(fmt % values, level, self, is_debug)
            if kwargs.get("nl", 1):
                target.write("\n", level, self, is_debug)
            used.append(target)


# Global logging object.
log = Logger()
