# Copyright (c) 2011 The Chromium OS Authors. All rights reserved.
# Use of this source code is governed by a BSD-style license that can be
# found in the LICENSE file.

"""Common python helpers shared by the reader, writer and piper utilities."""

import datetime
import logging
import re
import sys
import time

RUNTIME_ERROR = 1
SYNTAX_ERROR = 3

DEFAULT_BLOCK_SIZE = 256 * 1024

_KILOBYTE = 1024
_MEGABYTE = 1024 * 1024

# Numeric values are limited to the range of a signed 32 bit integer.
_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1
_INTEGER_RE = re.compile(r'^[+-]?[0-9]+\Z')

_SIZE_SUFFIXES = (('k', _KILOBYTE),
                  ('m', _MEGABYTE))

# Order matters: 'ms' must be tried before 'm'.
_DURATION_SUFFIXES = (('ms', datetime.timedelta(milliseconds=1)),
                      ('m', datetime.timedelta(minutes=1)),
                      ('h', datetime.timedelta(hours=1)))

_LOG_FORMAT = '%(message)s'


class ArgumentError(ValueError):
  """Raised when the command line cannot be understood."""
  pass


def ParseInteger(text):
  """Parses a signed decimal integer; unlike int(), no spaces or underscores."""
  if not _INTEGER_RE.match(text):
    raise ValueError('invalid syntax')
  return int(text)


def ParseInt32(text):
  """Parses a signed decimal integer that must fit in 32 bits.

  Raises:
    ValueError: text is not a decimal integer or is out of range.
  """
  value = ParseInteger(text)
  if value < _INT32_MIN or value > _INT32_MAX:
    raise ValueError('value out of range')
  return value


def _SplitSuffix(text, suffixes, default):
  for suffix, unit in suffixes:
    if text.endswith(suffix):
      return text[:-len(suffix)], unit
  return text, default


def ParseSize(text):
  """Converts a size such as '512', '64k' or '2m' into a byte count.

  Arguments:
    text: decimal integer, optionally suffixed with k (KiB) or m (MiB).

  Returns:
    The number of bytes as an int.

  Raises:
    ValueError: the text is malformed, or the size is negative or does not
      fit in 32 bits.
  """
  number, multiplier = _SplitSuffix(text, _SIZE_SUFFIXES, 1)
  size = ParseInt32(number) * multiplier
  if size < 0:
    raise ValueError('size must not be negative')
  if size > _INT32_MAX:
    raise ValueError('size out of range')
  return size


def ParseDuration(text):
  """Converts a duration such as '5', '250ms', '3m' or '1h' to a timedelta.

  A bare number is a count of seconds.

  Raises:
    ValueError: the text is malformed or the duration is negative.
  """
  number, unit = _SplitSuffix(text, _DURATION_SUFFIXES,
                              datetime.timedelta(seconds=1))
  duration = ParseInt32(number) * unit
  if duration < datetime.timedelta(0):
    raise ValueError('duration must not be negative')
  return duration


def FormatBytes(count):
  """Returns count as whole bytes, kilobytes or megabytes."""
  if count > 10 * _MEGABYTE:
    return '%d megabytes' % (count // _MEGABYTE)
  elif count > 10 * _KILOBYTE:
    return '%d kilobytes' % (count // _KILOBYTE)
  return '%d bytes' % count


def _TrimFraction(text):
  if '.' in text:
    text = text.rstrip('0').rstrip('.')
  return text


def FormatDuration(duration):
  """Renders a timedelta the way Go prints a time.Duration, e.g. 1m2.5s.

  Resolution is one microsecond.
  """
  usecs = duration // datetime.timedelta(microseconds=1)
  if usecs == 0:
    return '0s'
  sign = ''
  if usecs < 0:
    sign = '-'
    usecs = -usecs
  if usecs < 1000:
    return '%s%dµs' % (sign, usecs)
  if usecs < 1000000:
    return '%s%sms' % (sign, _TrimFraction('%d.%03d' % divmod(usecs, 1000)))

  minutes, usecs = divmod(usecs, 60 * 1000000)
  hours, minutes = divmod(minutes, 60)
  seconds = _TrimFraction('%d.%06d' % divmod(usecs, 1000000)) + 's'
  if hours:
    return '%s%dh%dm%s' % (sign, hours, minutes, seconds)
  if minutes:
    return '%s%dm%s' % (sign, minutes, seconds)
  return sign + seconds


def Sleep(duration):
  """Blocks the calling thread for a timedelta."""
  seconds = duration.total_seconds()
  if seconds > 0:
    time.sleep(seconds)


def _SetHandler(log, handler):
  CloseLog(log)
  handler.setFormatter(logging.Formatter(_LOG_FORMAT))
  log.addHandler(handler)
  return log


def CreateLog(name, stream=None):
  """Returns a logger for one program run that writes only to stream.

  Arguments:
    name: Logger name, normally the program name.
    stream: File object to log to.  Defaults to the current sys.stdout.
  """
  log = logging.getLogger('iopattern.%s' % name)
  log.propagate = False
  log.setLevel(logging.INFO)
  return _SetHandler(log, logging.StreamHandler(stream or sys.stdout))


def RedirectLog(log, path):
  """Points log at a freshly created (or truncated) file.

  Raises:
    OSError: the file could not be created.
  """
  handler = logging.FileHandler(path, mode='w', encoding='utf-8')
  return _SetHandler(log, handler)


def DiscardLog(log):
  """Silences log."""
  return _SetHandler(log, logging.NullHandler())


def CloseLog(log):
  """Detaches and closes every handler on log."""
  for handler in list(log.handlers):
    log.removeHandler(handler)
    handler.close()


def Die(log, message, exit_code):
  """Logs message, closes the log and exits the process.

  Keyword arguments:
    log: The logger the message should go to.
    message: The message to be emitted.
    exit_code: Status the process exits with.
  """
  if exit_code:
    log.error(message)
  else:
    log.info(message)
  CloseLog(log)
  sys.exit(exit_code)
