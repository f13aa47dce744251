from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Mapping, TypeVar, Union

T = TypeVar("T")


def gather(
    tasks: Mapping[str, Callable[[], T]], max_workers: int = 8
) -> Dict[str, Union[T, Exception]]:
    """
    Run independent fetches in parallel and wait for all of them to settle.

    Each key maps to either the task's return value or the exception it
    raised; one failing task never cancels the others.
    """
    if not tasks:
        return {}
    results: Dict[str, Union[T, Exception]] = {}
    with ThreadPoolExecutor(max_workers=min(max_workers, len(tasks))) as pool:
        futures = {key: pool.submit(fn) for key, fn in tasks.items()}
        for key, future in futures.items():
            try:
                results[key] = future.result()
            except Exception as e:
                results[key] = e
    return results
