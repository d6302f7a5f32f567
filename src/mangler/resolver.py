# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Resolve rename locations concurrently and turn them into edits."""

import concurrent.futures
import logging
import time
from dataclasses import dataclass

from mangler.model import Edit, RenameLocation
from mangler.service import SemanticService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenameRequest:
    """Represent one queued rename query.

    Attributes:
        file_name: File holding the declaration.
        offset: Offset of the declared name.
        new_name: Replacement name for every location found.
    """

    file_name: str
    offset: int
    new_name: str


class RenameResolver:
    """Fan rename queries out to a bounded worker pool and collect edits."""

    def __init__(self, service: SemanticService, max_workers: int = 2) -> None:
        """Initialize resolver state.

        Args:
            service: Semantic service answering rename queries.
            max_workers: Maximum number of concurrent queries.

        Raises:
            ValueError: If ``max_workers`` is not greater than zero.
        """
        if max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        self._service = service
        self._max_workers = max_workers
        self._requests: list[RenameRequest] = []

    @property
    def pending(self) -> int:
        """Return the number of queued queries."""
        return len(self._requests)

    def queue(self, file_name: str, offset: int, new_name: str) -> None:
        """Queue a rename query for the declaration at ``offset``."""
        self._requests.append(
            RenameRequest(file_name=file_name, offset=offset, new_name=new_name)
        )

    def resolve(self) -> dict[str, list[Edit]]:
        """Run every queued query and group the resulting edits per file.

        All queries finish before any edit is produced, and the pool is shut
        down before this method returns.

        Returns:
            File name to edits in query order.
        """
        requests = self._requests
        self._requests = []
        results: list[list[RenameLocation]] = [[] for _ in requests]
        started = time.monotonic()

        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self._max_workers
        ) as executor:
            future_to_index = {
                executor.submit(
                    self._service.find_rename_locations,
                    request.file_name,
                    request.offset,
                ): index
                for index, request in enumerate(requests)
            }
            for future in concurrent.futures.as_completed(future_to_index):
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except Exception:
                    request = requests[index]
                    logger.error(
                        "Rename query failed (file=%s offset=%s new_name=%s)",
                        request.file_name,
                        request.offset,
                        request.new_name,
                    )
                    raise

        edits_by_file: dict[str, list[Edit]] = {}
        for request, locations in zip(requests, results):
            for location in locations:
                edits_by_file.setdefault(location.file_name, []).append(
                    to_edit(location, request.new_name)
                )
        elapsed_ms = int(round((time.monotonic() - started) * 1000))
        logger.info(
            "Done preparing edits (queries=%s files=%s elapsed_ms=%s)",
            len(requests),
            len(edits_by_file),
            elapsed_ms,
        )
        return edits_by_file


def to_edit(location: RenameLocation, new_name: str) -> Edit:
    """Build the edit that renames one location.

    Args:
        location: Span returned by the semantic service.
        new_name: Replacement name.

    Returns:
        Edit keeping the location's literal prefix and suffix text.
    """
    return Edit(
        file_name=location.file_name,
        offset=location.offset,
        length=location.length,
        new_text=f"{location.prefix_text}{new_name}{location.suffix_text}",
    )
