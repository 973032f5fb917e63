import logging
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Optional

from .errors import TransferError

LOG = logging.getLogger(__name__)


def run_all(
    operation: str,
    tasks: Dict[str, Callable[[], Any]],
    max_workers: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Run every task concurrently and wait for all of them.

    A failing task never cancels its siblings. When any task failed, a
    TransferError naming the failed and the completed items is raised after
    the join; otherwise the results are returned keyed by item name.
    """
    if not tasks:
        return {}

    workers = max_workers or len(tasks)
    results: Dict[str, Any] = {}
    failures: Dict[str, BaseException] = {}

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=operation) as executor:
        futures: Dict[Future, str] = {executor.submit(fn): name for name, fn in tasks.items()}
        wait(futures, return_when=ALL_COMPLETED)

    for future, name in futures.items():
        exc = future.exception()
        if exc is not None:
            LOG.error("%s failed for %s: %s", operation, name, exc)
            failures[name] = exc
        else:
            results[name] = future.result()

    if failures:
        raise TransferError(operation, failures, sorted(results))
    return results
