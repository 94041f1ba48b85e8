"""Module for the ``.grind`` file kept in each problem-set directory."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from grind.errors import DotFileError

PER_PROBLEM_SET_DOT_FILE = ".grind"


@dataclass
class ProblemInfo:
    """Progress on one problem of an assignment.

    Attributes:
        id: The server's problem ID
        step: The step the user is currently working on
        whitelist: Files the user may submit for this problem
    """

    id: int
    step: int
    whitelist: set[str] = field(default_factory=set)

    @classmethod
    def from_dict(cls, data: dict) -> "ProblemInfo":
        whitelist = data.get("whitelist") or {}
        if isinstance(whitelist, dict):
            names = {name for name, allowed in whitelist.items() if allowed}
        else:
            names = set(whitelist)
        return cls(id=int(data["id"]), step=int(data["step"]), whitelist=names)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "step": self.step,
            "whitelist": {name: True for name in sorted(self.whitelist)},
        }


@dataclass
class ProblemSet:
    """Local record of an assignment checked out into a directory.

    Attributes:
        assignment_id: The server's assignment ID
        problems: Progress records keyed by problem name
        path: Directory holding the ``.grind`` file; not stored in the file
    """

    assignment_id: int
    problems: dict[str, ProblemInfo] = field(default_factory=dict)
    path: Path | None = field(default=None, compare=False)

    @property
    def dotfile(self) -> Path:
        if self.path is None:
            raise ValueError("ProblemSet has no directory")
        return self.path / PER_PROBLEM_SET_DOT_FILE

    @classmethod
    def from_dict(cls, data: dict, path: Path | None = None) -> "ProblemSet":
        """Create a ProblemSet from the stored JSON object."""
        problems = {
            name: ProblemInfo.from_dict(info)
            for name, info in (data.get("problems") or {}).items()
        }
        return cls(assignment_id=int(data["assignmentID"]), problems=problems, path=path)

    def to_dict(self) -> dict:
        return {
            "assignmentID": self.assignment_id,
            "problems": {name: info.to_dict() for name, info in self.problems.items()},
        }

    @classmethod
    def load(cls, directory: Path) -> "ProblemSet":
        """Load the ``.grind`` file in `directory`.

        Raises:
            DotFileError: If the file is missing or malformed.
        """
        dotfile = Path(directory) / PER_PROBLEM_SET_DOT_FILE
        try:
            raw = dotfile.read_text(encoding="utf-8")
        except OSError as e:
            raise DotFileError(f"unable to read {dotfile}: {e}") from e
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError("expected a JSON object")
            problem_set = cls.from_dict(data, path=Path(directory))
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DotFileError(f"failed to parse {dotfile}: {e}") from e
        logger.debug(f"Loaded assignment {problem_set.assignment_id} from {dotfile}")
        return problem_set

    @classmethod
    def find(cls, start: Path | None = None) -> "ProblemSet":
        """Load the nearest ``.grind`` file in `start` or one of its parents.

        Raises:
            DotFileError: If no directory up to the root has one.
        """
        start = Path(start if start is not None else Path.cwd()).resolve()
        for directory in (start, *start.parents):
            if (directory / PER_PROBLEM_SET_DOT_FILE).is_file():
                return cls.load(directory)
        raise DotFileError(
            f"unable to find {PER_PROBLEM_SET_DOT_FILE} in {start} or its parent directories; "
            'use "grind get" to fetch an assignment first'
        )

    def save(self) -> Path:
        """Write the record back to its ``.grind`` file."""
        dotfile = self.dotfile
        dotfile.write_text(json.dumps(self.to_dict(), indent=4) + "\n", encoding="utf-8")
        logger.debug(f"Saved assignment {self.assignment_id} to {dotfile}")
        return dotfile
