"""JSON agent registry for crew.

The registry is a single agents.json document rewritten wholesale on every
change. It is advisory: live tmux state is always re-queried, so records can
go stale and `prune` exists to drop them.

Every read-modify-write holds an exclusive flock on a sibling .lock file and
replaces the document atomically, so concurrent invocations cannot lose
each other's updates.
"""

from __future__ import annotations

import fcntl
import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Generator

from pydantic import ValidationError

from crew.config import ensure_registry_dir, get_registry_file
from crew.errors import AgentNotFoundError, CrewError
from crew.models import AgentRecord, RegistryDocument

logger = logging.getLogger("crew.registry")


class AgentRegistry:
    """Read and update the agents.json registry file."""

    def __init__(self, path: Path | str | None = None, home: str | Path | None = None):
        """
        Args:
            path: Explicit registry file (overrides home)
            home: Crew home whose agents/registry holds the file
        """
        if path:
            self.path = Path(path)
        else:
            ensure_registry_dir(home)
            self.path = get_registry_file(home)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        if not self.path.exists():
            with self._locked():
                if not self.path.exists():
                    self._write(RegistryDocument())

    @contextmanager
    def _locked(self) -> Generator[None, None, None]:
        """Hold an exclusive lock on the registry for the duration."""
        lock_file = open(self.lock_path, "a+")
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
            lock_file.close()

    def _read(self) -> RegistryDocument:
        if not self.path.exists():
            return RegistryDocument()
        try:
            data = json.loads(self.path.read_text() or "{}")
            return RegistryDocument.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            raise CrewError(f"Registry file {self.path} is corrupt: {e}") from e

    def _write(self, document: RegistryDocument) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".agents-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(document.model_dump(mode="json"), f, indent=2)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _update(self, mutate: Callable[[RegistryDocument], None]) -> RegistryDocument:
        with self._locked():
            document = self._read()
            mutate(document)
            self._write(document)
            return document

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def load(self) -> RegistryDocument:
        """Read the current document."""
        with self._locked():
            return self._read()

    def records(self) -> list[AgentRecord]:
        return self.load().agents

    def add(self, session: str, window: str, role: str) -> AgentRecord:
        """Append a record for an agent."""
        record = AgentRecord(session=session, window=str(window), role=role)
        self._update(lambda doc: doc.agents.append(record))
        logger.info("Registered %s (%s)", record.target, role)
        return record

    def remove(self, session: str, window: str) -> list[AgentRecord]:
        """
        Remove all records addressed at session:window.

        Raises:
            AgentNotFoundError: If nothing was registered there.
        """
        with self._locked():
            document = self._read()
            removed = document.matching(session, str(window))
            if removed:
                document.agents = [a for a in document.agents if a not in removed]
                self._write(document)
        if not removed:
            raise AgentNotFoundError(f"No registry entry for {session}:{window}")
        logger.info("Removed %d record(s) for %s:%s", len(removed), session, window)
        return removed

    def prune(self, is_stale: Callable[[AgentRecord], bool], dry_run: bool = False) -> list[AgentRecord]:
        """
        Drop records for which `is_stale` returns True.

        Args:
            is_stale: Predicate evaluated per record
            dry_run: Only report what would be removed

        Returns:
            The stale records.
        """
        stale: list[AgentRecord] = []

        def mutate(doc: RegistryDocument) -> None:
            stale.extend(a for a in doc.agents if is_stale(a))
            if not dry_run:
                doc.agents = [a for a in doc.agents if a not in stale]

        if dry_run:
            mutate(self.load())
        else:
            self._update(mutate)
            if stale:
                logger.info("Pruned %d stale record(s)", len(stale))
        return stale

    def find(self, role: str | None = None, session: str | None = None) -> list[AgentRecord]:
        """Records filtered by exact role and/or session."""
        return [
            a for a in self.records()
            if (role is None or a.role == role) and (session is None or a.session == session)
        ]
