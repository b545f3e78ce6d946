#!/usr/bin/env python3

# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Reads from a file or stdin in a configurable pattern and discards the data.

Unlike writer and piper, reader logs to stdout unless -l is given, and can
linger before exiting (-ed) so a peer sees the descriptor held open.
"""

import sys

import iopattern_lib
import run_config
import transfer_loop
from iopattern_lib import FormatBytes, FormatDuration

USAGE = (
    'Reads from a file or stdin in a pattern depending on several '
    'parameters.\n'
    'By default, reads from stdin in 256k blocks until EOF\n'
    ' -f \tFile: file path to read from.\n'
    ' -s \tSize: How many bytes to request on each read. Suffix with k or m '
    'for kilobytes or megabytes.\n'
    ' -c \tCount: How many reads to try before quitting, unless EOF is '
    'reached first. Negative means no limit.\n'
    ' -d \tDelay: How many seconds to delay between reads. Suffix with ms, m, '
    'or h.\n'
    ' -od\tOpen Delay: How many seconds to delay before opening the file. '
    'Suffix with ms, m, or h. Ignored \n'
    '    \twithout -f.\n'
    ' -ed\tExit Delay: How many seconds to delay before exiting. Suffix with '
    'ms, m, or h.\n'
    ' -t \tTimeout: How many seconds (not counting Start Delay) to run before '
    'quitting, unless Count is reached\n'
    '    \tfirst. Suffix with ms, m, or h.\n'
    ' -sd\tStart Delay: How many seconds to delay before the first read. '
    'Suffix with ms, m, or h.\n'
    ' -l \tLog File: Log output to file instead of printing to stdout.\n'
    ' -rc\tReturn Code: Return code on successful exit. Will be overridden by '
    'any errors. Default is 0.\n'
    ' -h \tHelp: Prints this text\n'
    'Returns 0 on success, 1 if a runtime error is encountered, 3 if bad '
    'arguments are passed.')

_FLAGS = dict(run_config.COMMON_FLAGS)
_FLAGS.update({
    '-f': run_config.PathFlag('input_path'),
    '-c': run_config.CountFlag(),
    '-ed': run_config.DurationFlag('exit_delay', 'exit delay'),
    '-rc': run_config.ReturnCodeFlag(),
})

_DEFAULTS = dict(run_config.BASE_DEFAULTS, count=-1)


def main(argv=None):
  if argv is None:
    argv = sys.argv
  resolver = run_config.ArgumentResolver('reader', USAGE, _FLAGS, _DEFAULTS,
                                         run_config.NegativeIsUnlimited,
                                         run_config.STDOUT_SINK)
  config = resolver.Resolve(argv[1:])
  log = config.log

  source, _ = transfer_loop.OpenStreams(config, read=True)
  try:
    iopattern_lib.Sleep(config.start_delay)
    result = transfer_loop.TransferLoop(config, source=source).Run()
    log.info('Read %s in %s', FormatBytes(result.bytes_read),
             FormatDuration(result.elapsed))
    iopattern_lib.Sleep(config.exit_delay)
  finally:
    transfer_loop.CloseStreams(config, source, None)
    iopattern_lib.CloseLog(log)

  if result.failed:
    return iopattern_lib.RUNTIME_ERROR
  return config.return_code


if __name__ == '__main__':
  sys.exit(main(sys.argv))
