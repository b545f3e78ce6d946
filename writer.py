#!/usr/bin/env python3

# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Writes zero filled, numbered blocks to a file or stdout."""

import sys

import iopattern_lib
import run_config
import transfer_loop
from iopattern_lib import FormatBytes, FormatDuration

USAGE = (
    'Writes to a file or stdout in a pattern depending on several '
    'parameters.\n'
    'By default, writes one 256k block to stdout\n'
    'Each block is prefixed with the iteration number (starting at 0) and is '
    'filled with zeros\n'
    ' -f \tFile: file path to write to.\n'
    ' -s \tSize: How many bytes to write each iteration. Suffix with k or m '
    'for kilobytes or megabytes.\n'
    ' -c \tCount: How many writes to try before quitting. 0 means no limit.\n'
    ' -d \tDelay: How many seconds to delay between writes. Suffix with ms, '
    'm, or h.\n'
    ' -od\tOpen Delay: How many seconds to delay before opening the file. '
    'Suffix with ms, m, or h. Ignored\n'
    '    \twithout -f.\n'
    ' -t \tTimeout: How many seconds (not counting Start Delay) to run before '
    'closing the file, unless Count is\n'
    '    \treached first. Suffix with ms, m, or h.\n'
    ' -sd\tStart Delay: How many seconds to delay before the first write. '
    'Suffix with ms, m, or h.\n'
    ' -l \tLog File: Filename to log to.\n'
    ' -rc\tReturn Code: Return code on successful exit. Will be overridden by '
    'any errors. Default is 0.\n'
    ' -h \tHelp: Prints this text\n'
    'Returns 0 on success, 1 if a runtime error is encountered, 3 if bad '
    'arguments are passed.')

_FLAGS = dict(run_config.COMMON_FLAGS)
_FLAGS.update({
    '-f': run_config.PathFlag('output_path'),
    '-c': run_config.CountFlag(),
    '-rc': run_config.ReturnCodeFlag(),
})

_DEFAULTS = dict(run_config.BASE_DEFAULTS, count=1)


def main(argv=None):
  if argv is None:
    argv = sys.argv
  resolver = run_config.ArgumentResolver('writer', USAGE, _FLAGS, _DEFAULTS,
                                         run_config.ZeroIsUnlimited,
                                         run_config.DISCARD_SINK)
  config = resolver.Resolve(argv[1:])
  log = config.log

  _, sink = transfer_loop.OpenStreams(config, write=True)
  try:
    iopattern_lib.Sleep(config.start_delay)
    result = transfer_loop.TransferLoop(config, sink=sink, stamp=True).Run()
    log.info('Wrote %s in %s', FormatBytes(result.bytes_written),
             FormatDuration(result.elapsed))
  finally:
    transfer_loop.CloseStreams(config, None, sink)
    iopattern_lib.CloseLog(log)

  if result.failed:
    return iopattern_lib.RUNTIME_ERROR
  return config.return_code


if __name__ == '__main__':
  sys.exit(main(sys.argv))
