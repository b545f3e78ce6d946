# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Turns a utility's command line into an immutable RunConfig.

Every flag except -h takes exactly one value.  Flags are processed left to
right, so a -l only captures errors reported after it.
"""

import collections
import datetime

import iopattern_lib
from iopattern_lib import ArgumentError


RunConfig = collections.namedtuple('RunConfig', [
    'input_path',
    'output_path',
    'block_size',
    'iteration_limit',
    'delay',
    'open_delay',
    'start_delay',
    'exit_delay',
    'timeout',
    'log',
    'return_code',
])

# Sinks a program may log to when no -l is given.
STDOUT_SINK = 'stdout'
DISCARD_SINK = 'discard'


def ZeroIsUnlimited(count):
  """Count rule for piper and writer: zero or less runs forever."""
  if count <= 0:
    return None
  return count


def NegativeIsUnlimited(count):
  """Count rule for reader: a negative count runs forever, zero never reads."""
  if count < 0:
    return None
  return count


class Flag(object):
  """Describes one value-taking flag.

  Attributes:
    field: Key in the values dictionary that receives the parsed value.
    parser: Callable converting the raw text, raises ValueError when invalid.
    error_format: Format for the error message, gets the raw text and reason.
  """

  def __init__(self, field, parser=str, error_format=None):
    self.field = field
    self.parser = parser
    self.error_format = error_format

  def Parse(self, text):
    try:
      return self.parser(text)
    except ValueError as e:
      raise ArgumentError(self.error_format % (text, e))


def SizeFlag(field, name):
  return Flag(field, iopattern_lib.ParseSize,
              'invalid argument for ' + name + " '%s': %s")


def DurationFlag(field, name):
  return Flag(field, iopattern_lib.ParseDuration,
              'invalid argument for ' + name + " '%s': %s")


def CountFlag():
  return Flag('count', iopattern_lib.ParseInt32,
              "invalid argument for count '%s': %s")


def ReturnCodeFlag():
  return Flag('return_code', iopattern_lib.ParseInteger,
              "Invalid return code '%s': %s")


def PathFlag(field):
  return Flag(field)


# Flags understood by every utility.
COMMON_FLAGS = {
    '-s': SizeFlag('block_size', 'size'),
    '-d': DurationFlag('delay', 'delay'),
    '-od': DurationFlag('open_delay', 'open delay'),
    '-sd': DurationFlag('start_delay', 'start delay'),
    '-t': DurationFlag('timeout', 'timeout'),
}

_ZERO = datetime.timedelta(0)

BASE_DEFAULTS = {
    'input_path': None,
    'output_path': None,
    'block_size': iopattern_lib.DEFAULT_BLOCK_SIZE,
    'count': 0,
    'delay': _ZERO,
    'open_delay': _ZERO,
    'start_delay': _ZERO,
    'exit_delay': _ZERO,
    'timeout': _ZERO,
    'return_code': 0,
}


class ArgumentResolver(object):
  """Parses the command line of one utility.

  Arguments:
    prog: Program name, used for the logger and the usage hint.
    usage: Full help text printed by -h.
    flags: Dictionary of flag -> Flag, in addition to -l and -h.
    defaults: Values used for anything the command line does not set.
    count_rule: Maps the -c value onto an iteration limit (None is unlimited).
    default_sink: STDOUT_SINK or DISCARD_SINK, used when -l is absent.
  """

  def __init__(self, prog, usage, flags, defaults, count_rule,
               default_sink=DISCARD_SINK):
    self._prog = prog
    self._usage = usage
    self._flags = flags
    self._defaults = defaults
    self._count_rule = count_rule
    self._default_sink = default_sink
    self._log_redirected = False

  def Resolve(self, args):
    """Returns a RunConfig for args (argv without the program name).

    Exits the process with SYNTAX_ERROR on bad input and with 0 after -h.
    """
    log = iopattern_lib.CreateLog(self._prog)
    self._log_redirected = False
    try:
      values = self._ParseArgs(args, log)
    except ArgumentError as e:
      iopattern_lib.Die(log, "%s\nDo '%s -h' for usage" % (e, self._prog),
                        iopattern_lib.SYNTAX_ERROR)

    if not self._log_redirected and self._default_sink == DISCARD_SINK:
      iopattern_lib.DiscardLog(log)

    count = values.pop('count')
    values['iteration_limit'] = self._count_rule(count)
    values['log'] = log
    return RunConfig(**values)

  def _ParseArgs(self, args, log):
    values = dict(self._defaults)
    index = 0
    while index < len(args):
      arg = args[index]
      if arg == '-h':
        iopattern_lib.Die(log, self._usage, 0)

      if arg != '-l' and arg not in self._flags:
        raise ArgumentError("Invalid argument '%s'" % arg)
      if index + 1 >= len(args):
        raise ArgumentError("missing value for argument '%s'" % arg)
      value = args[index + 1]
      index += 2

      if arg == '-l':
        self._OpenLog(log, value)
        continue
      flag = self._flags[arg]
      values[flag.field] = flag.Parse(value)
    return values

  def _OpenLog(self, log, path):
    try:
      iopattern_lib.RedirectLog(log, path)
    except OSError as e:
      raise ArgumentError('could not open log file: %s' % e)
    self._log_redirected = True
