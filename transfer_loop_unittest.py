#!/usr/bin/env python3
#
# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Unit tests for transfer_loop."""

import datetime
import io
import os
import shutil
import tempfile
import unittest

from mox3 import mox

import iopattern_lib
import run_config
import transfer_loop


def _Config(log, **overrides):
  values = dict(run_config.BASE_DEFAULTS)
  del values['count']
  values.update(iteration_limit=None, log=log)
  values.update(overrides)
  return run_config.RunConfig(**values)


class TransferLoopTest(mox.MoxTestBase):

  def setUp(self):
    mox.MoxTestBase.setUp(self)
    self.tempdir = tempfile.mkdtemp()
    self.stream = io.StringIO()
    self.log = iopattern_lib.CreateLog('transfer_loop_unittest', self.stream)
    self.slept = []
    self.stubs.Set(iopattern_lib, 'Sleep', self.slept.append)
    self.addCleanup(self.stubs.UnsetAll)
    self.fds = []

  def tearDown(self):
    for fd in self.fds:
      os.close(fd)
    iopattern_lib.CloseLog(self.log)
    shutil.rmtree(self.tempdir)
    mox.MoxTestBase.tearDown(self)

  def _Path(self, name, contents=None):
    path = os.path.join(self.tempdir, name)
    if contents is not None:
      with open(path, 'wb') as f:
        f.write(contents)
    return path

  def _Open(self, path, flags=os.O_RDONLY):
    fd = os.open(path, flags, 0o644)
    self.fds.append(fd)
    return fd

  def _ReadFile(self, path):
    with open(path, 'rb') as f:
      return f.read()

  def testReadUntilEof(self):
    source = self._Open(self._Path('in', b'x' * 300))
    config = _Config(self.log, block_size=100)
    result = transfer_loop.TransferLoop(config, source=source).Run()
    self.assertEqual(result.bytes_read, 300)
    self.assertEqual(result.bytes_written, 0)
    # Three full reads, then a fourth that hits end of input.
    self.assertEqual(result.iterations, 4)
    self.assertFalse(result.failed)

  def testShortReadIsNotEof(self):
    source = self._Open(self._Path('in', b'x' * 250))
    config = _Config(self.log, block_size=100)
    result = transfer_loop.TransferLoop(config, source=source).Run()
    self.assertEqual(result.bytes_read, 250)
    self.assertEqual(result.iterations, 4)

  def testIterationLimit(self):
    source = self._Open(self._Path('in', b'x' * 300))
    config = _Config(self.log, block_size=100, iteration_limit=2)
    result = transfer_loop.TransferLoop(config, source=source).Run()
    self.assertEqual(result.bytes_read, 200)
    self.assertEqual(result.iterations, 2)

  def testZeroLimitDoesNothing(self):
    source = self._Open(self._Path('in', b'x' * 300))
    config = _Config(self.log, block_size=100, iteration_limit=0)
    result = transfer_loop.TransferLoop(config, source=source).Run()
    self.assertEqual(result.bytes_read, 0)
    self.assertEqual(result.iterations, 0)

  def testZeroLengthReadsAreCounted(self):
    source = self._Open(self._Path('in', b'x' * 300))
    config = _Config(self.log, block_size=0, iteration_limit=3)
    result = transfer_loop.TransferLoop(config, source=source).Run()
    self.assertEqual(result.bytes_read, 0)
    self.assertEqual(result.iterations, 3)
    self.assertFalse(result.failed)

  def testWriterStampsBlocks(self):
    path = self._Path('out')
    sink = self._Open(path, os.O_WRONLY | os.O_CREAT)
    config = _Config(self.log, block_size=10, iteration_limit=3)
    result = transfer_loop.TransferLoop(config, sink=sink, stamp=True).Run()
    self.assertEqual(result.bytes_written, 30)
    self.assertEqual(result.iterations, 3)
    self.assertEqual(self._ReadFile(path),
                     b'0' + b'\0' * 9 + b'1' + b'\0' * 9 + b'2' + b'\0' * 9)

  def testStampTruncatedToBlock(self):
    path = self._Path('out')
    sink = self._Open(path, os.O_WRONLY | os.O_CREAT)
    config = _Config(self.log, block_size=1, iteration_limit=12)
    transfer_loop.TransferLoop(config, sink=sink, stamp=True).Run()
    self.assertEqual(self._ReadFile(path), b'012345678911')

  def testUnstampedBlocksAreZero(self):
    path = self._Path('out')
    sink = self._Open(path, os.O_WRONLY | os.O_CREAT)
    config = _Config(self.log, block_size=4, iteration_limit=2)
    transfer_loop.TransferLoop(config, sink=sink).Run()
    self.assertEqual(self._ReadFile(path), b'\0' * 8)

  def testPipeCopiesWhatWasRead(self):
    data = bytes(range(256)) * 3
    source = self._Open(self._Path('in', data))
    path = self._Path('out')
    sink = self._Open(path, os.O_WRONLY | os.O_CREAT)
    config = _Config(self.log, block_size=100)
    result = transfer_loop.TransferLoop(config, source, sink).Run()
    self.assertEqual(result.bytes_read, len(data))
    self.assertEqual(result.bytes_written, len(data))
    self.assertEqual(self._ReadFile(path), data)

  def testDelayOnlyBetweenIterations(self):
    path = self._Path('out')
    sink = self._Open(path, os.O_WRONLY | os.O_CREAT)
    delay = datetime.timedelta(milliseconds=20)
    config = _Config(self.log, block_size=1, iteration_limit=3, delay=delay)
    transfer_loop.TransferLoop(config, sink=sink).Run()
    self.assertEqual(self.slept, [delay, delay])

  def testTimeout(self):
    clock = iter([100.0, 100.0, 101.0, 102.5, 103.0])
    self.stubs.Set(transfer_loop.time, 'monotonic', lambda: next(clock))
    path = self._Path('out')
    sink = self._Open(path, os.O_WRONLY | os.O_CREAT)
    config = _Config(self.log, block_size=1,
                     timeout=datetime.timedelta(seconds=2))
    result = transfer_loop.TransferLoop(config, sink=sink).Run()
    self.assertEqual(result.iterations, 2)
    self.assertEqual(result.elapsed, datetime.timedelta(seconds=3))
    self.assertFalse(result.failed)

  def testTimeoutExhaustedBeforeFirstIteration(self):
    clock = iter([0.0, 5.0, 5.0])
    self.stubs.Set(transfer_loop.time, 'monotonic', lambda: next(clock))
    source = self._Open(self._Path('in', b'data'))
    config = _Config(self.log, block_size=1,
                     timeout=datetime.timedelta(seconds=1))
    result = transfer_loop.TransferLoop(config, source=source).Run()
    self.assertEqual(result.iterations, 0)
    self.assertEqual(result.bytes_read, 0)

  def testZeroTimeoutNeverExpires(self):
    # Only the start and end of the run consult the clock.
    clock = iter([0.0, 1e9])
    self.stubs.Set(transfer_loop.time, 'monotonic', lambda: next(clock))
    source = self._Open(self._Path('in', b'abc'))
    config = _Config(self.log, block_size=1)
    result = transfer_loop.TransferLoop(config, source=source).Run()
    self.assertEqual(result.bytes_read, 3)
    self.assertEqual(result.iterations, 4)

  def testWriteFailure(self):
    sink = self._Open(self._Path('out', b''))
    config = _Config(self.log, block_size=10, iteration_limit=5)
    result = transfer_loop.TransferLoop(config, sink=sink).Run()
    self.assertTrue(result.failed)
    self.assertEqual(result.bytes_written, 0)
    self.assertEqual(result.iterations, 0)
    self.assertTrue(self.stream.getvalue().startswith(
        'Error encountered while writing: '))

  def testReadFailure(self):
    source = self._Open(self._Path('in', b'data'), os.O_WRONLY)
    config = _Config(self.log, block_size=10)
    result = transfer_loop.TransferLoop(config, source=source).Run()
    self.assertTrue(result.failed)
    self.assertTrue(self.stream.getvalue().startswith(
        'Error encountered while reading: '))

  def testEmptyNonBlockingSourceFails(self):
    read_end, write_end = os.pipe()
    self.fds.extend([read_end, write_end])
    os.set_blocking(read_end, False)
    config = _Config(self.log, block_size=10, iteration_limit=3)
    result = transfer_loop.TransferLoop(config, source=read_end).Run()
    self.assertTrue(result.failed)
    self.assertEqual(result.iterations, 0)
    self.assertEqual(self.slept, [])
    self.assertTrue('Error encountered while reading' in
                    self.stream.getvalue())


class OpenStreamsTest(mox.MoxTestBase):

  def setUp(self):
    mox.MoxTestBase.setUp(self)
    self.tempdir = tempfile.mkdtemp()
    self.stream = io.StringIO()
    self.log = iopattern_lib.CreateLog('open_streams_unittest', self.stream)
    self.slept = []
    self.stubs.Set(iopattern_lib, 'Sleep', self.slept.append)
    self.addCleanup(self.stubs.UnsetAll)

  def tearDown(self):
    iopattern_lib.CloseLog(self.log)
    shutil.rmtree(self.tempdir)
    mox.MoxTestBase.tearDown(self)

  def testStandardStreams(self):
    delay = datetime.timedelta(seconds=4)
    config = _Config(self.log, open_delay=delay)
    source, sink = transfer_loop.OpenStreams(config, read=True, write=True)
    self.assertEqual((source, sink),
                     (transfer_loop.STDIN_FD, transfer_loop.STDOUT_FD))
    # Nothing named, so the open delay is skipped.
    self.assertEqual(self.slept, [])
    transfer_loop.CloseStreams(config, source, sink)

  def testUnusedDirection(self):
    config = _Config(self.log)
    self.assertEqual(transfer_loop.OpenStreams(config, read=True),
                     (transfer_loop.STDIN_FD, None))
    self.assertEqual(transfer_loop.OpenStreams(config, write=True),
                     (None, transfer_loop.STDOUT_FD))

  def testOutputNotTruncated(self):
    path = os.path.join(self.tempdir, 'out')
    with open(path, 'wb') as f:
      f.write(b'abcdef')
    delay = datetime.timedelta(seconds=4)
    config = _Config(self.log, output_path=path, open_delay=delay)
    _, sink = transfer_loop.OpenStreams(config, write=True)
    os.write(sink, b'XY')
    transfer_loop.CloseStreams(config, None, sink)
    with open(path, 'rb') as f:
      self.assertEqual(f.read(), b'XYcdef')
    self.assertEqual(self.slept, [delay])

  def testOutputCreated(self):
    path = os.path.join(self.tempdir, 'new')
    config = _Config(self.log, output_path=path)
    _, sink = transfer_loop.OpenStreams(config, write=True)
    transfer_loop.CloseStreams(config, None, sink)
    self.assertTrue(os.path.exists(path))

  def testMissingInputIsRuntimeError(self):
    path = os.path.join(self.tempdir, 'missing')
    config = _Config(self.log, input_path=path)
    try:
      transfer_loop.OpenStreams(config, read=True)
    except SystemExit as e:
      self.assertEqual(e.code, iopattern_lib.RUNTIME_ERROR)
    else:
      self.fail('OpenStreams did not exit')
    self.assertTrue(path in self.stream.getvalue())
    self.assertFalse(os.path.exists(path))

  def testMissingInputCreatedOnRequest(self):
    path = os.path.join(self.tempdir, 'missing')
    config = _Config(self.log, input_path=path)
    source, _ = transfer_loop.OpenStreams(config, read=True,
                                          create_input=True)
    self.assertEqual(os.read(source, 10), b'')
    transfer_loop.CloseStreams(config, source, None)
    self.assertTrue(os.path.exists(path))

  def testIgnoredPathDoesNotDelay(self):
    # A writer never opens input_path, so it must not wait for it.
    config = _Config(self.log, input_path='/unused',
                     open_delay=datetime.timedelta(seconds=1))
    _, sink = transfer_loop.OpenStreams(config, write=True)
    self.assertEqual(sink, transfer_loop.STDOUT_FD)
    self.assertEqual(self.slept, [])


if __name__ == '__main__':
  unittest.main()
