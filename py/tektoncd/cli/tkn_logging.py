"""Logging setup for tkn."""
import logging

import json_log_formatter

from tektoncd.cli import formatted

TEXT = "text"
JSON = "json"

TEXT_FORMAT = ("%(levelname)s|%(asctime)s"
               "|%(pathname)s|%(lineno)d| %(message)s")
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


class CustomisedJSONFormatter(json_log_formatter.JSONFormatter):
  """A custom formatter to produce logs in json format."""

  def __init__(self, clock=None):
    super(CustomisedJSONFormatter, self).__init__()
    self.clock = clock or formatted.Clock()

  def json_record(self, message, extra, record):
    extra["message"] = message

    extra["filename"] = record.pathname
    extra["line"] = record.lineno
    extra["level"] = record.levelname
    if "time" not in extra:
      extra["time"] = self.clock.now().isoformat()
    extra["thread"] = record.thread
    extra["thread_name"] = record.threadName
    return extra


def setup_logging(level=logging.WARNING, log_format=TEXT):
  """Configure the root logger.

  Args:
    level: Log level.
    log_format: TEXT for human readable lines; JSON for one JSON object per
      line so logs can be queried by field.
  """
  if log_format not in [TEXT, JSON]:
    raise ValueError("log_format must be one of {0}; got {1}".format(
      [TEXT, JSON], log_format))

  handler = logging.StreamHandler()
  if log_format == JSON:
    handler.setFormatter(CustomisedJSONFormatter())
  else:
    handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))

  logger = logging.getLogger()
  logger.addHandler(handler)
  logger.setLevel(level)
  return handler
