"""Order PipelineRuns for display."""


def _timestamp_key(value):
  # Present timestamps sort first, most recent first.
  if value is None:
    return (1, 0)
  return (0, -value.timestamp())


def _sort_key(run):
  start_time = None
  if run.status is not None:
    start_time = run.status.start_time
  metadata = run.metadata
  # Creation time only orders runs that haven't started.
  creation_key = (0, 0)
  if start_time is None:
    creation_key = _timestamp_key(metadata.creation_timestamp)
  return (_timestamp_key(start_time),
          creation_key,
          metadata.name or "",
          metadata.namespace or "")


def sort_by_start_time(runs):
  """Sort PipelineRuns, most recently started first.

  Runs that haven't started yet come after all started runs and are
  ordered by creation time, newest first. Runs started at the same time
  and remaining ties are ordered by name and then namespace.

  Args:
    runs: Iterable of v1 or v1beta1 PipelineRuns.

  Returns:
    runs: A new sorted list.
  """
  return sorted(runs, key=_sort_key)


def truncate(runs, limit):
  """Keep the first limit runs; limit <= 0 keeps them all."""
  if limit is None or limit <= 0:
    return list(runs)
  return list(runs[:limit])
