#!/usr/bin/env python3
#
# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Unit tests for reader."""

import datetime
import io
import os
import re
import shutil
import sys
import tempfile
import unittest

from mox3 import mox

import iopattern_lib
import reader


class ReaderTest(mox.MoxTestBase):

  def setUp(self):
    mox.MoxTestBase.setUp(self)
    self.stdout = sys.stdout
    sys.stdout = io.StringIO()
    self.tempdir = tempfile.mkdtemp()
    self.input = os.path.join(self.tempdir, 'in')
    with open(self.input, 'wb') as f:
      f.write(b'r' * 300)

  def tearDown(self):
    sys.stdout = self.stdout
    shutil.rmtree(self.tempdir)
    mox.MoxTestBase.tearDown(self)

  def _StubSleep(self):
    slept = []
    self.stubs.Set(iopattern_lib, 'Sleep', slept.append)
    self.addCleanup(self.stubs.UnsetAll)
    return slept

  def testReadsToEof(self):
    rc = reader.main(['reader', '-f', self.input, '-s', '100'])
    self.assertEqual(rc, 0)
    self.assertTrue(re.match(r'^Read 300 bytes in \S+\n$',
                             sys.stdout.getvalue()))

  def testCountLimitsReads(self):
    reader.main(['reader', '-f', self.input, '-s', '100', '-c', '2'])
    self.assertTrue(sys.stdout.getvalue().startswith('Read 200 bytes in '))

  def testZeroCountReadsNothing(self):
    reader.main(['reader', '-f', self.input, '-c', '0'])
    self.assertTrue(sys.stdout.getvalue().startswith('Read 0 bytes in '))

  def testLogFile(self):
    log = os.path.join(self.tempdir, 'log')
    rc = reader.main(['reader', '-f', self.input, '-l', log, '-rc', '9'])
    self.assertEqual(rc, 9)
    self.assertEqual(sys.stdout.getvalue(), '')
    with open(log) as f:
      self.assertTrue(f.read().startswith('Read 300 bytes in '))

  def testDelaysInOrder(self):
    slept = self._StubSleep()
    rc = reader.main(['reader', '-f', self.input, '-s', '150', '-od', '1',
                      '-sd', '2', '-d', '3', '-ed', '4'])
    self.assertEqual(rc, 0)
    # Two full reads and the read that finds end of input.
    seconds = datetime.timedelta(seconds=1)
    self.assertEqual(slept, [1 * seconds, 2 * seconds, 3 * seconds,
                             3 * seconds, 4 * seconds])

  def testMissingFile(self):
    missing = os.path.join(self.tempdir, 'missing')
    try:
      reader.main(['reader', '-f', missing])
    except SystemExit as e:
      self.assertEqual(e.code, iopattern_lib.RUNTIME_ERROR)
    else:
      self.fail('reader did not exit')
    self.assertTrue(missing in sys.stdout.getvalue())
    self.assertFalse(os.path.exists(missing))

  def testReadFailureOverridesReturnCode(self):
    rc = reader.main(['reader', '-f', self.tempdir, '-rc', '4'])
    self.assertEqual(rc, iopattern_lib.RUNTIME_ERROR)
    output = sys.stdout.getvalue()
    self.assertTrue('Error encountered while reading' in output)
    self.assertTrue('Read 0 bytes in ' in output)

  def testBadSize(self):
    try:
      reader.main(['reader', '-s', '5K'])
    except SystemExit as e:
      self.assertEqual(e.code, iopattern_lib.SYNTAX_ERROR)
    else:
      self.fail('reader did not exit')
    output = sys.stdout.getvalue()
    self.assertTrue("invalid argument for size '5K'" in output)
    self.assertTrue("Do 'reader -h' for usage" in output)


if __name__ == '__main__':
  unittest.main()
