#!/usr/bin/env python3
#
# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Unit tests for iopattern_lib."""

import datetime
import io
import os
import tempfile
import unittest

from mox3 import mox

import iopattern_lib


class ParseSizeTest(unittest.TestCase):

  def testBareNumberIsBytes(self):
    self.assertEqual(iopattern_lib.ParseSize('100'), 100)
    self.assertEqual(iopattern_lib.ParseSize('0'), 0)
    self.assertEqual(iopattern_lib.ParseSize('+7'), 7)

  def testSuffixes(self):
    for n in (1, 4, 256):
      self.assertEqual(iopattern_lib.ParseSize('%dk' % n), n * 1024)
      self.assertEqual(iopattern_lib.ParseSize('%dm' % n), n * 1024 * 1024)

  def testMalformed(self):
    for text in ('', 'k', 'm', '5K', '5M', '5g', '10ms', '1.5k', ' 5', '5 ',
                 '1_000', 'abc'):
      self.assertRaises(ValueError, iopattern_lib.ParseSize, text)

  def testNegative(self):
    self.assertRaises(ValueError, iopattern_lib.ParseSize, '-1')
    self.assertRaises(ValueError, iopattern_lib.ParseSize, '-4k')

  def testOutOfRange(self):
    self.assertEqual(iopattern_lib.ParseSize('2147483647'), 2147483647)
    self.assertRaises(ValueError, iopattern_lib.ParseSize, '2147483648')

  def testSuffixedSizeOutOfRange(self):
    self.assertEqual(iopattern_lib.ParseSize('2047m'), 2047 * 1024 * 1024)
    self.assertRaises(ValueError, iopattern_lib.ParseSize, '2048m')
    self.assertRaises(ValueError, iopattern_lib.ParseSize, '2097152k')
    self.assertRaises(ValueError, iopattern_lib.ParseSize, '2147483647m')


class ParseDurationTest(unittest.TestCase):

  def testBareNumberIsSeconds(self):
    self.assertEqual(iopattern_lib.ParseDuration('5'),
                     datetime.timedelta(seconds=5))

  def testSuffixes(self):
    self.assertEqual(iopattern_lib.ParseDuration('250ms'),
                     datetime.timedelta(milliseconds=250))
    self.assertEqual(iopattern_lib.ParseDuration('3m'),
                     datetime.timedelta(minutes=3))
    self.assertEqual(iopattern_lib.ParseDuration('2h'),
                     datetime.timedelta(hours=2))
    self.assertEqual(iopattern_lib.ParseDuration('0ms'),
                     datetime.timedelta(0))

  def testMalformed(self):
    for text in ('', 'ms', '5s', '1.5', '5H', '5d', 'h1', '5 m'):
      self.assertRaises(ValueError, iopattern_lib.ParseDuration, text)

  def testNegative(self):
    self.assertRaises(ValueError, iopattern_lib.ParseDuration, '-1')
    self.assertRaises(ValueError, iopattern_lib.ParseDuration, '-500ms')


class FormatTest(unittest.TestCase):

  def testFormatBytes(self):
    self.assertEqual(iopattern_lib.FormatBytes(0), '0 bytes')
    self.assertEqual(iopattern_lib.FormatBytes(5000), '5000 bytes')
    self.assertEqual(iopattern_lib.FormatBytes(20000), '19 kilobytes')
    self.assertEqual(iopattern_lib.FormatBytes(20 * 1024 * 1024),
                     '20 megabytes')

  def testFormatBytesBoundaries(self):
    self.assertEqual(iopattern_lib.FormatBytes(10240), '10240 bytes')
    self.assertEqual(iopattern_lib.FormatBytes(10241), '10 kilobytes')
    self.assertEqual(iopattern_lib.FormatBytes(10 * 1024 * 1024),
                     '10240 kilobytes')
    self.assertEqual(iopattern_lib.FormatBytes(10 * 1024 * 1024 + 1),
                     '10 megabytes')

  def testFormatDuration(self):
    td = datetime.timedelta
    self.assertEqual(iopattern_lib.FormatDuration(td(0)), '0s')
    self.assertEqual(iopattern_lib.FormatDuration(td(microseconds=750)),
                     '750µs')
    self.assertEqual(iopattern_lib.FormatDuration(td(microseconds=1500)),
                     '1.5ms')
    self.assertEqual(iopattern_lib.FormatDuration(td(milliseconds=2)), '2ms')
    self.assertEqual(iopattern_lib.FormatDuration(td(seconds=2.25)), '2.25s')
    self.assertEqual(iopattern_lib.FormatDuration(td(seconds=61.5)),
                     '1m1.5s')
    self.assertEqual(iopattern_lib.FormatDuration(td(hours=1)), '1h0m0s')
    self.assertEqual(
        iopattern_lib.FormatDuration(td(hours=1, minutes=30, seconds=5)),
        '1h30m5s')


class SleepTest(mox.MoxTestBase):

  def setUp(self):
    mox.MoxTestBase.setUp(self)
    self.slept = []
    self.stubs.Set(iopattern_lib.time, 'sleep', self.slept.append)
    self.addCleanup(self.stubs.UnsetAll)

  def testSleepsInSeconds(self):
    iopattern_lib.Sleep(datetime.timedelta(milliseconds=1500))
    self.assertEqual(self.slept, [1.5])

  def testZeroDoesNotSleep(self):
    iopattern_lib.Sleep(datetime.timedelta(0))
    self.assertEqual(self.slept, [])


class LogTest(unittest.TestCase):

  def setUp(self):
    self.stream = io.StringIO()
    self.log = iopattern_lib.CreateLog('unittest', self.stream)

  def tearDown(self):
    iopattern_lib.CloseLog(self.log)

  def testMessagesOnly(self):
    self.log.info('Read %s in %s', '5 bytes', '1s')
    self.log.debug('not shown')
    self.assertEqual(self.stream.getvalue(), 'Read 5 bytes in 1s\n')

  def testCreateLogResetsHandlers(self):
    other = io.StringIO()
    log = iopattern_lib.CreateLog('unittest', other)
    log.info('hello')
    self.assertEqual(len(log.handlers), 1)
    self.assertEqual(self.stream.getvalue(), '')
    self.assertEqual(other.getvalue(), 'hello\n')

  def testRedirectLog(self):
    fd, path = tempfile.mkstemp()
    os.close(fd)
    try:
      iopattern_lib.RedirectLog(self.log, path)
      self.log.info('to the file')
      iopattern_lib.CloseLog(self.log)
      with open(path) as f:
        self.assertEqual(f.read(), 'to the file\n')
      self.assertEqual(self.stream.getvalue(), '')
    finally:
      os.remove(path)

  def testRedirectLogFailureKeepsOldHandler(self):
    self.assertRaises(OSError, iopattern_lib.RedirectLog, self.log,
                      '/nonexistent-dir/log.txt')
    self.log.info('still here')
    self.assertEqual(self.stream.getvalue(), 'still here\n')

  def testDiscardLog(self):
    iopattern_lib.DiscardLog(self.log)
    self.log.info('gone')
    self.assertEqual(self.stream.getvalue(), '')

  def testDie(self):
    try:
      iopattern_lib.Die(self.log, 'boom', iopattern_lib.SYNTAX_ERROR)
    except SystemExit as e:
      self.assertEqual(e.code, 3)
    else:
      self.fail('Die did not exit')
    self.assertEqual(self.stream.getvalue(), 'boom\n')
    self.assertEqual(self.log.handlers, [])


if __name__ == '__main__':
  unittest.main()
