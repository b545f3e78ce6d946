#!/usr/bin/env python3
#
# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Unit tests for piper."""

import datetime
import io
import os
import re
import shutil
import sys
import tempfile
import time
import unittest

from mox3 import mox

import iopattern_lib
import piper


class PiperTest(mox.MoxTestBase):

  def setUp(self):
    mox.MoxTestBase.setUp(self)
    self.stdout = sys.stdout
    sys.stdout = io.StringIO()
    self.tempdir = tempfile.mkdtemp()
    self.input = os.path.join(self.tempdir, 'in')
    self.output = os.path.join(self.tempdir, 'out')
    self.log = os.path.join(self.tempdir, 'log')
    self.data = os.urandom(300)
    with open(self.input, 'wb') as f:
      f.write(self.data)

  def tearDown(self):
    sys.stdout = self.stdout
    shutil.rmtree(self.tempdir)
    mox.MoxTestBase.tearDown(self)

  def _ReadLog(self):
    with open(self.log) as f:
      return f.read()

  def _ReadOutput(self):
    with open(self.output, 'rb') as f:
      return f.read()

  def testCopiesUntilEof(self):
    rc = piper.main(['piper', '-i', self.input, '-o', self.output,
                     '-s', '7', '-l', self.log])
    self.assertEqual(rc, 0)
    self.assertEqual(self._ReadOutput(), self.data)
    self.assertTrue(re.match(r'^Read 300 bytes and wrote 300 bytes in \S+\n$',
                             self._ReadLog()))

  def testZeroCountIsUnlimited(self):
    rc = piper.main(['piper', '-i', self.input, '-o', self.output,
                     '-s', '10', '-c', '0'])
    self.assertEqual(rc, 0)
    self.assertEqual(self._ReadOutput(), self.data)

  def testCountLimit(self):
    piper.main(['piper', '-i', self.input, '-o', self.output, '-s', '50',
                '-c', '2', '-l', self.log])
    self.assertEqual(self._ReadOutput(), self.data[:100])
    self.assertTrue(self._ReadLog().startswith(
        'Read 100 bytes and wrote 100 bytes in '))

  def testOutputOverwrittenInPlace(self):
    with open(self.output, 'wb') as f:
      f.write(b'z' * 400)
    piper.main(['piper', '-i', self.input, '-o', self.output])
    self.assertEqual(self._ReadOutput(), self.data + b'z' * 100)

  def testTimeout(self):
    start = time.monotonic()
    rc = piper.main(['piper', '-i', self.input, '-o', self.output,
                     '-s', '1', '-d', '50ms', '-t', '300ms'])
    elapsed = time.monotonic() - start
    self.assertEqual(rc, 0)
    self.assertTrue(elapsed >= 0.3)
    # The timeout, not end of input, ended the copy.
    self.assertTrue(0 < len(self._ReadOutput()) < len(self.data))

  def testMissingInputIsCreated(self):
    missing = os.path.join(self.tempdir, 'missing')
    rc = piper.main(['piper', '-i', missing, '-o', self.output,
                     '-l', self.log])
    self.assertEqual(rc, 0)
    self.assertTrue(os.path.exists(missing))
    self.assertTrue(self._ReadLog().startswith(
        'Read 0 bytes and wrote 0 bytes in '))

  def testDelaysInOrder(self):
    slept = []
    self.stubs.Set(iopattern_lib, 'Sleep', slept.append)
    self.addCleanup(self.stubs.UnsetAll)
    rc = piper.main(['piper', '-i', self.input, '-o', self.output,
                     '-s', '200', '-od', '10ms', '-sd', '20ms', '-d', '1m'])
    self.assertEqual(rc, 0)
    self.assertEqual(slept, [datetime.timedelta(milliseconds=10),
                             datetime.timedelta(milliseconds=20),
                             datetime.timedelta(minutes=1),
                             datetime.timedelta(minutes=1)])

  def testOpenFailure(self):
    try:
      piper.main(['piper', '-i', self.input, '-o', self.tempdir,
                  '-l', self.log])
    except SystemExit as e:
      self.assertEqual(e.code, iopattern_lib.RUNTIME_ERROR)
    else:
      self.fail('piper did not exit')
    self.assertTrue(self.tempdir in self._ReadLog())

  def testUnknownFlag(self):
    try:
      piper.main(['piper', '-x'])
    except SystemExit as e:
      self.assertEqual(e.code, iopattern_lib.SYNTAX_ERROR)
    else:
      self.fail('piper did not exit')
    output = sys.stdout.getvalue()
    self.assertTrue("Invalid argument '-x'" in output)
    self.assertTrue("Do 'piper -h' for usage" in output)

  def testReturnCodeFlagNotAccepted(self):
    try:
      piper.main(['piper', '-rc', '5'])
    except SystemExit as e:
      self.assertEqual(e.code, iopattern_lib.SYNTAX_ERROR)
    else:
      self.fail('piper did not exit')

  def testHelpAbandonsLogFile(self):
    try:
      piper.main(['piper', '-l', self.log, '-h', '-x'])
    except SystemExit as e:
      self.assertEqual(e.code, 0)
    else:
      self.fail('piper did not exit')
    self.assertEqual(self._ReadLog(), piper.USAGE + '\n')


if __name__ == '__main__':
  unittest.main()
