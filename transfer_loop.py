# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Bounded, timed read/write loop shared by reader, writer and piper.

All I/O goes straight to file descriptors so that every iteration maps onto a
single read(2) and as few write(2) calls as it takes to flush one block.
"""

import collections
import datetime
import os
import time

import iopattern_lib

STDIN_FD = 0
STDOUT_FD = 1

_FILE_MODE = 0o755

TransferResult = collections.namedtuple('TransferResult', [
    'bytes_read',
    'bytes_written',
    'iterations',
    'elapsed',
    'failed',
])


def OpenStreams(config, read=False, write=False, create_input=False):
  """Opens the descriptors a run needs.

  Paths missing from config fall back to stdin and stdout.  The open delay is
  only honoured when at least one named file is about to be opened.  The
  output is opened first and is never truncated.

  Arguments:
    config: RunConfig of the run.
    read: Whether the run needs a source.
    write: Whether the run needs a sink.
    create_input: Create the input file if it does not exist.

  Returns:
    Tuple of (source, sink) descriptors, None for a direction not used.
  """
  input_path = read and config.input_path
  output_path = write and config.output_path
  if input_path or output_path:
    iopattern_lib.Sleep(config.open_delay)

  source = sink = None
  try:
    if output_path:
      config.log.debug('Opening %s for writing', output_path)
      sink = os.open(output_path, os.O_WRONLY | os.O_CREAT, _FILE_MODE)
    if input_path:
      flags = os.O_RDONLY
      if create_input:
        flags |= os.O_CREAT
      config.log.debug('Opening %s for reading', input_path)
      source = os.open(input_path, flags, _FILE_MODE)
  except OSError as e:
    if sink is not None:
      os.close(sink)
    iopattern_lib.Die(config.log, str(e), iopattern_lib.RUNTIME_ERROR)

  if read and source is None:
    source = STDIN_FD
  if write and sink is None:
    sink = STDOUT_FD
  return source, sink


def CloseStreams(config, source, sink):
  """Closes the descriptors OpenStreams opened from paths."""
  if source is not None and config.input_path:
    os.close(source)
  if sink is not None and config.output_path:
    os.close(sink)


class TransferLoop(object):
  """Moves blocks from source to sink until a limit is hit.

  With only a sink, every block is zero filled.  When stamp is set, the front
  of each block carries the iteration number in ASCII.  With both ends, each
  block written is exactly the bytes that were just read.
  """

  def __init__(self, config, source=None, sink=None, stamp=False):
    self._config = config
    self._source = source
    self._sink = sink
    self._stamp = stamp
    self._bytes_read = 0
    self._bytes_written = 0

  def _LimitReached(self, iterations):
    limit = self._config.iteration_limit
    return limit is not None and iterations >= limit

  def _Read(self, view):
    """Returns (bytes read, end of input reached)."""
    count = os.readv(self._source, [view])
    self._bytes_read += count
    return count, count == 0 and len(view) > 0

  def _Write(self, data):
    view = memoryview(data)
    while view:
      written = os.write(self._sink, view)
      self._bytes_written += written
      view = view[written:]

  def _StampBlock(self, block, iteration):
    stamp = str(iteration).encode('ascii')[:len(block)]
    block[:len(stamp)] = stamp
    return block

  def Run(self):
    """Runs the loop and returns a TransferResult."""
    config = self._config
    log = config.log
    timeout = config.timeout.total_seconds()
    block = bytearray(config.block_size)
    view = memoryview(block)
    iterations = 0
    failed = False

    start = time.monotonic()
    while not self._LimitReached(iterations):
      if timeout and time.monotonic() - start >= timeout:
        log.debug('Timed out after %d iterations', iterations)
        break

      data = view
      eof = False
      if self._source is not None:
        try:
          count, eof = self._Read(view)
        except OSError as e:
          log.error('Error encountered while reading: %s', e)
          failed = True
          break
        data = view[:count]
      elif self._stamp:
        self._StampBlock(block, iterations)

      if self._sink is not None:
        try:
          self._Write(data)
        except OSError as e:
          log.error('Error encountered while writing: %s', e)
          failed = True
          break

      iterations += 1
      if eof or self._LimitReached(iterations):
        break
      iopattern_lib.Sleep(config.delay)

    elapsed = datetime.timedelta(seconds=time.monotonic() - start)
    return TransferResult(self._bytes_read, self._bytes_written, iterations,
                          elapsed, failed)
