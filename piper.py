#!/usr/bin/env python3

# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Copies a file or stdin to a file or stdout in a configurable pattern.

Each iteration reads up to one block and writes back exactly what was read.
The copy stops at end of input, after the requested number of iterations or
once the timeout expires, whichever comes first.
"""

import sys

import iopattern_lib
import run_config
import transfer_loop
from iopattern_lib import FormatBytes, FormatDuration

USAGE = (
    'Reads data from a file or stdin and writes it to a file or stdout in a '
    'pattern depending on several parameters.\n'
    'By default, reads from stdin and writes to stdout in 256k blocks until '
    'EOF\n'
    ' -i \tInput file: file path to read from. Created if it does not '
    'exist.\n'
    ' -o \tOutput file: file path to write to.\n'
    ' -s \tSize: How many bytes to attempt to read and write each iteration. '
    'Suffix with k or m for kilobytes or\n'
    '    \tmegabytes.\n'
    ' -c \tCount: How many iterations to try before quitting, unless EOF is '
    'reached first. 0 means no limit.\n'
    ' -d \tDelay: How many seconds to delay between iterations. Suffix with '
    'ms, m, or h.\n'
    ' -od\tOpen Delay: How many seconds to delay before opening the files. '
    'Suffix with ms, m, or h. Ignored without\n'
    '    \t-o or -i.\n'
    ' -t \tTimeout: How many seconds (not counting Start Delay) to run before '
    'quitting, unless Count is reached\n'
    '    \tfirst. Suffix with ms, m, or h.\n'
    ' -sd\tStart Delay: How many seconds to delay before beginning to read and '
    'write. Suffix with ms, m, or h.\n'
    ' -l \tLog File: Filename to log to.\n'
    ' -h \tHelp: Prints this text\n'
    'Returns 0 on success, 1 if a runtime error is encountered, 3 if bad '
    'arguments are passed.')

_FLAGS = dict(run_config.COMMON_FLAGS)
_FLAGS.update({
    '-i': run_config.PathFlag('input_path'),
    '-o': run_config.PathFlag('output_path'),
    '-c': run_config.CountFlag(),
})

_DEFAULTS = dict(run_config.BASE_DEFAULTS)


def main(argv=None):
  if argv is None:
    argv = sys.argv
  resolver = run_config.ArgumentResolver('piper', USAGE, _FLAGS, _DEFAULTS,
                                         run_config.ZeroIsUnlimited,
                                         run_config.DISCARD_SINK)
  config = resolver.Resolve(argv[1:])
  log = config.log

  # The input is opened with O_CREAT, a missing input file reads as empty.
  source, sink = transfer_loop.OpenStreams(config, read=True, write=True,
                                           create_input=True)
  try:
    iopattern_lib.Sleep(config.start_delay)
    result = transfer_loop.TransferLoop(config, source, sink).Run()
    log.info('Read %s and wrote %s in %s', FormatBytes(result.bytes_read),
             FormatBytes(result.bytes_written),
             FormatDuration(result.elapsed))
  finally:
    transfer_loop.CloseStreams(config, source, sink)
    iopattern_lib.CloseLog(log)

  if result.failed:
    return iopattern_lib.RUNTIME_ERROR
  return 0


if __name__ == '__main__':
  sys.exit(main(sys.argv))
