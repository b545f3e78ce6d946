#!/usr/bin/env python3
#
# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Unit tests for run_config."""

import datetime
import io
import logging
import os
import shutil
import sys
import tempfile
import unittest

import iopattern_lib
import run_config

_FLAGS = dict(run_config.COMMON_FLAGS)
_FLAGS.update({
    '-f': run_config.PathFlag('input_path'),
    '-c': run_config.CountFlag(),
    '-ed': run_config.DurationFlag('exit_delay', 'exit delay'),
    '-rc': run_config.ReturnCodeFlag(),
})

_USAGE = 'Usage text for tool.'


def _Resolver(count_rule=run_config.NegativeIsUnlimited,
              sink=run_config.STDOUT_SINK, **defaults):
  values = dict(run_config.BASE_DEFAULTS)
  values.update(defaults)
  return run_config.ArgumentResolver('tool', _USAGE, _FLAGS, values,
                                     count_rule, sink)


class CountRuleTest(unittest.TestCase):

  def testZeroIsUnlimited(self):
    self.assertEqual(run_config.ZeroIsUnlimited(0), None)
    self.assertEqual(run_config.ZeroIsUnlimited(-4), None)
    self.assertEqual(run_config.ZeroIsUnlimited(3), 3)

  def testNegativeIsUnlimited(self):
    self.assertEqual(run_config.NegativeIsUnlimited(-1), None)
    self.assertEqual(run_config.NegativeIsUnlimited(0), 0)
    self.assertEqual(run_config.NegativeIsUnlimited(3), 3)


class ArgumentResolverTest(unittest.TestCase):

  def setUp(self):
    self.stdout = sys.stdout
    sys.stdout = io.StringIO()
    self.tempdir = tempfile.mkdtemp()

  def tearDown(self):
    sys.stdout = self.stdout
    shutil.rmtree(self.tempdir)

  def _AssertExits(self, code, resolver, args):
    try:
      resolver.Resolve(args)
    except SystemExit as e:
      self.assertEqual(e.code, code)
    else:
      self.fail('Resolve(%r) did not exit' % (args,))

  def testDefaults(self):
    config = _Resolver(count=-1).Resolve([])
    self.assertEqual(config.input_path, None)
    self.assertEqual(config.output_path, None)
    self.assertEqual(config.block_size, 256 * 1024)
    self.assertEqual(config.iteration_limit, None)
    self.assertEqual(config.delay, datetime.timedelta(0))
    self.assertEqual(config.timeout, datetime.timedelta(0))
    self.assertEqual(config.return_code, 0)
    iopattern_lib.CloseLog(config.log)

  def testAllFlags(self):
    config = _Resolver().Resolve(
        ['-f', 'in.dat', '-s', '4k', '-c', '7', '-d', '250ms', '-od', '2',
         '-sd', '3m', '-t', '1h', '-ed', '5ms', '-rc', '42'])
    self.assertEqual(config.input_path, 'in.dat')
    self.assertEqual(config.block_size, 4096)
    self.assertEqual(config.iteration_limit, 7)
    self.assertEqual(config.delay, datetime.timedelta(milliseconds=250))
    self.assertEqual(config.open_delay, datetime.timedelta(seconds=2))
    self.assertEqual(config.start_delay, datetime.timedelta(minutes=3))
    self.assertEqual(config.timeout, datetime.timedelta(hours=1))
    self.assertEqual(config.exit_delay, datetime.timedelta(milliseconds=5))
    self.assertEqual(config.return_code, 42)
    iopattern_lib.CloseLog(config.log)

  def testLaterFlagWins(self):
    config = _Resolver().Resolve(['-s', '10', '-s', '20'])
    self.assertEqual(config.block_size, 20)
    iopattern_lib.CloseLog(config.log)

  def testCountRuleApplied(self):
    resolver = _Resolver(count_rule=run_config.ZeroIsUnlimited, count=1)
    config = resolver.Resolve(['-c', '0'])
    self.assertEqual(config.iteration_limit, None)
    config = resolver.Resolve([])
    self.assertEqual(config.iteration_limit, 1)
    iopattern_lib.CloseLog(config.log)

  def testUnknownFlag(self):
    self._AssertExits(3, _Resolver(), ['-s', '10', '-x', '1'])
    output = sys.stdout.getvalue()
    self.assertTrue("Invalid argument '-x'" in output)
    self.assertTrue("Do 'tool -h' for usage" in output)

  def testUnknownFlagReportedOnStdoutWithDiscardSink(self):
    self._AssertExits(3, _Resolver(sink=run_config.DISCARD_SINK), ['-x'])
    self.assertTrue("Invalid argument '-x'" in sys.stdout.getvalue())

  def testMissingValue(self):
    self._AssertExits(3, _Resolver(), ['-s'])
    self.assertTrue("missing value for argument '-s'" in
                    sys.stdout.getvalue())

  def testBadValues(self):
    for args, message in (
        (['-s', '12x'], "invalid argument for size '12x'"),
        (['-s', '2147483647m'],
         "invalid argument for size '2147483647m': size out of range"),
        (['-d', '1.5'], "invalid argument for delay '1.5'"),
        (['-od', 'x'], "invalid argument for open delay 'x'"),
        (['-sd', '5s'], "invalid argument for start delay '5s'"),
        (['-t', '-1'], "invalid argument for timeout '-1'"),
        (['-ed', 'h'], "invalid argument for exit delay 'h'"),
        (['-c', 'many'], "invalid argument for count 'many'"),
        (['-rc', 'ok'], "Invalid return code 'ok'")):
      sys.stdout = io.StringIO()
      self._AssertExits(3, _Resolver(), args)
      self.assertTrue(message in sys.stdout.getvalue(),
                      '%r not in %r' % (message, sys.stdout.getvalue()))

  def testLogFileReceivesErrors(self):
    log_path = os.path.join(self.tempdir, 'log.txt')
    self._AssertExits(3, _Resolver(), ['-l', log_path, '-x', '1'])
    with open(log_path) as f:
      self.assertTrue("Invalid argument '-x'" in f.read())
    self.assertEqual(sys.stdout.getvalue(), '')

  def testErrorsBeforeLogGoToStdout(self):
    log_path = os.path.join(self.tempdir, 'log.txt')
    self._AssertExits(3, _Resolver(), ['-x', '1', '-l', log_path])
    self.assertTrue("Invalid argument '-x'" in sys.stdout.getvalue())
    self.assertFalse(os.path.exists(log_path))

  def testLogFileTruncated(self):
    log_path = os.path.join(self.tempdir, 'log.txt')
    with open(log_path, 'w') as f:
      f.write('old contents\n')
    config = _Resolver().Resolve(['-l', log_path])
    config.log.info('new')
    iopattern_lib.CloseLog(config.log)
    with open(log_path) as f:
      self.assertEqual(f.read(), 'new\n')

  def testUncreatableLogFile(self):
    log_path = os.path.join(self.tempdir, 'missing', 'log.txt')
    self._AssertExits(3, _Resolver(), ['-l', log_path])
    self.assertTrue('could not open log file' in sys.stdout.getvalue())

  def testHelp(self):
    self._AssertExits(0, _Resolver(), ['-h', '-x'])
    self.assertEqual(sys.stdout.getvalue(), _USAGE + '\n')

  def testHelpGoesToLogFile(self):
    log_path = os.path.join(self.tempdir, 'log.txt')
    self._AssertExits(0, _Resolver(), ['-l', log_path, '-h'])
    with open(log_path) as f:
      self.assertEqual(f.read(), _USAGE + '\n')

  def testDefaultSinks(self):
    config = _Resolver(sink=run_config.STDOUT_SINK).Resolve([])
    config.log.info('visible')
    self.assertEqual(sys.stdout.getvalue(), 'visible\n')

    config = _Resolver(sink=run_config.DISCARD_SINK).Resolve([])
    config.log.info('hidden')
    self.assertEqual(sys.stdout.getvalue(), 'visible\n')
    self.assertTrue(isinstance(config.log.handlers[0], logging.NullHandler))
    iopattern_lib.CloseLog(config.log)


if __name__ == '__main__':
  unittest.main()
