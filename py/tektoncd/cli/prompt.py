"""Ask the user questions on the terminal."""
import functools
import logging

import click

from tektoncd.cli import errors


def _interruptible(fn):
  """Turn the user aborting a prompt into PromptInterruptedError."""

  @functools.wraps(fn)
  def wrapper(*args, **kwargs):
    try:
      return fn(*args, **kwargs)
    except (click.Abort, KeyboardInterrupt, EOFError):
      logging.info("Prompt interrupted by the user")
      raise errors.PromptInterruptedError()

  return wrapper


class PromptDriver(object): # pylint: disable=useless-object-inheritance
  """Prompts backed by click."""

  @_interruptible
  def ask_string(self, message, required=False): # pylint: disable=no-self-use
    """Ask for a line of text.

    Args:
      message: The question.
      required: If true keep asking until the answer isn't empty.

    Returns:
      answer: The answer with surrounding whitespace removed.
    """
    if required:
      answer = ""
      while not answer:
        answer = click.prompt(message, type=str).strip()
      return answer
    return click.prompt(message, default="", show_default=False,
                        type=str).strip()

  @_interruptible
  def ask_select(self, message, options): # pylint: disable=no-self-use
    """Ask the user to pick one of options."""
    return click.prompt(message, type=click.Choice(options),
                        show_choices=True)

  def ask_secret(self, field_name):
    """Ask for the Kubernetes secret holding the value of field_name.

    Returns:
      secret_key: Key in the secret.
      secret_name: Name of the secret.
    """
    secret_key = self.ask_string(
      "Secret Key for {0} :".format(field_name))
    secret_name = self.ask_string(
      "Secret Name for {0} :".format(field_name))
    return secret_key, secret_name
