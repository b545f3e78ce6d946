#!/usr/bin/env python3
#
# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Unit tests for writer."""

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
import writer


class WriterTest(mox.MoxTestBase):

  def setUp(self):
    mox.MoxTestBase.setUp(self)
    self.stdout = sys.stdout
    sys.stdout = io.StringIO()
    self.tempdir = tempfile.mkdtemp()
    self.out = os.path.join(self.tempdir, 'out')
    self.log = os.path.join(self.tempdir, 'log')

  def tearDown(self):
    sys.stdout = self.stdout
    shutil.rmtree(self.tempdir)
    mox.MoxTestBase.tearDown(self)

  def _StubSleep(self):
    slept = []
    self.stubs.Set(iopattern_lib, 'Sleep', slept.append)
    self.addCleanup(self.stubs.UnsetAll)
    return slept

  def _ReadLog(self):
    with open(self.log) as f:
      return f.read()

  def testThreeBlocks(self):
    rc = writer.main(['writer', '-f', self.out, '-c', '3', '-s', '10',
                      '-l', self.log])
    self.assertEqual(rc, 0)
    with open(self.out, 'rb') as f:
      data = f.read()
    self.assertEqual(len(data), 30)
    self.assertEqual(data[0:1] + data[10:11] + data[20:21], b'012')
    self.assertTrue(re.match(r'^Wrote 30 bytes in \S+\n$', self._ReadLog()))

  def testDefaultsToOneBlock(self):
    rc = writer.main(['writer', '-f', self.out])
    self.assertEqual(rc, 0)
    self.assertEqual(os.path.getsize(self.out), 256 * 1024)
    # Nothing is logged without -l.
    self.assertEqual(sys.stdout.getvalue(), '')

  def testKilobyteSummary(self):
    writer.main(['writer', '-f', self.out, '-c', '2', '-s', '10k',
                 '-l', self.log])
    self.assertTrue(self._ReadLog().startswith('Wrote 20 kilobytes in '))

  def testReturnCode(self):
    rc = writer.main(['writer', '-f', self.out, '-s', '1', '-rc', '7'])
    self.assertEqual(rc, 7)

  def testZeroCountRunsUntilTimeout(self):
    rc = writer.main(['writer', '-f', self.out, '-c', '0', '-s', '1',
                      '-d', '10ms', '-t', '100ms'])
    self.assertEqual(rc, 0)
    self.assertTrue(os.path.getsize(self.out) > 1)

  def testDelaysInOrder(self):
    slept = self._StubSleep()
    rc = writer.main(['writer', '-f', self.out, '-c', '3', '-s', '1',
                      '-od', '1h', '-sd', '2m', '-d', '3ms'])
    self.assertEqual(rc, 0)
    self.assertEqual(slept, [datetime.timedelta(hours=1),
                             datetime.timedelta(minutes=2),
                             datetime.timedelta(milliseconds=3),
                             datetime.timedelta(milliseconds=3)])

  def testOpenFailure(self):
    try:
      writer.main(['writer', '-f', self.tempdir, '-l', self.log])
    except SystemExit as e:
      self.assertEqual(e.code, iopattern_lib.RUNTIME_ERROR)
    else:
      self.fail('writer did not exit')
    self.assertTrue(self.tempdir in self._ReadLog())

  @unittest.skipUnless(os.path.exists('/dev/full'), 'needs /dev/full')
  def testWriteFailureOverridesReturnCode(self):
    rc = writer.main(['writer', '-f', '/dev/full', '-rc', '5', '-s', '1k',
                      '-l', self.log])
    self.assertEqual(rc, iopattern_lib.RUNTIME_ERROR)
    log = self._ReadLog()
    self.assertTrue('Error encountered while writing' in log)
    self.assertTrue('Wrote 0 bytes in ' in log)

  def testBadArgument(self):
    try:
      writer.main(['writer', '-x'])
    except SystemExit as e:
      self.assertEqual(e.code, iopattern_lib.SYNTAX_ERROR)
    else:
      self.fail('writer did not exit')
    output = sys.stdout.getvalue()
    self.assertTrue("Invalid argument '-x'" in output)
    self.assertTrue("Do 'writer -h' for usage" in output)

  def testHelp(self):
    try:
      writer.main(['writer', '-h'])
    except SystemExit as e:
      self.assertEqual(e.code, 0)
    else:
      self.fail('writer did not exit')
    self.assertEqual(sys.stdout.getvalue(), writer.USAGE + '\n')


if __name__ == '__main__':
  unittest.main()
