# SPDX-License-Identifier: GPL-2.0-or-later
#
# Copyright (C) 2016-2026 fwzoneconf authors

import subprocess


def runProg(prog, argv=None, stdin=None):
    """Run prog with argv, return (exit status, combined output)

    The locale is forced to C, output of the backend is parsed.
    An exit status of 255 with empty output is returned if prog can not be
    executed at all.
    """
    if argv is None:
        argv = []

    args = [prog] + argv

    input_string = None
    if stdin:
        input_string = stdin.encode()

    env = {"LANG": "C"}
    try:
        process = subprocess.Popen(
            args,
            stdin=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdout=subprocess.PIPE,
            close_fds=True,
            env=env,
        )
    except OSError:
        return (255, "")

    (output, err_output) = process.communicate(input_string)
    output = output.decode("utf-8", "replace")
    return (process.returncode, output)
