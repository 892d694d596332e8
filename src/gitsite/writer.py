"""Write build artifacts into the output directory, skipping unchanged files."""

import json
from pathlib import Path
from typing import Any

from loguru import logger


class OutputWriter:
    """Write output files in a smart way.

    - Do not rewrite files whose contents are the same, so mtimes of
      unchanged artifacts stay put between builds.
    - Refuse paths that escape the output directory.
    """

    def __init__(self, output_dir: str | Path, *, dry_run: bool = False) -> None:
        self.output_dir = str(Path(output_dir).resolve())
        self.dry_run = dry_run
        self._files_made: set[str] = set()
        self._num_same = 0
        self._num_changed = 0
        self._num_new = 0
        logger.debug("Writer ready, output dir {!r}, dry_run {!r}", self.output_dir, dry_run)

    def _resolve(self, fname_rel: str) -> str:
        if Path(fname_rel).is_absolute():
            msg = f"must be relative: {fname_rel!r}"
            raise ValueError(msg)
        fname = str((Path(self.output_dir) / fname_rel).resolve())
        if not fname.startswith(self.output_dir + "/"):
            msg = f"Path escapes output dir: {fname_rel!r}"
            raise ValueError(msg)
        return fname

    def write_text(self, fname_rel: str, contents: str) -> bool:
        """Write contents to a file relative to the output directory.

        Returns:
            True if the file was created or changed, False if it was already up to date.
        """
        fname = self._resolve(fname_rel)
        if fname in self._files_made:
            msg = f"{fname_rel!r} written twice in one build"
            raise ValueError(msg)
        self._files_made.add(fname)

        action = "create"
        try:
            with open(fname, encoding="utf-8") as f:
                if f.read() == contents:
                    self._num_same += 1
                    return False
            action = "update"
        except (FileNotFoundError, UnicodeDecodeError):
            pass

        if action == "update":
            self._num_changed += 1
        else:
            self._num_new += 1

        if self.dry_run:
            logger.info("dry-run: would {} {!r}", action, fname)
        else:
            logger.debug("Writing ({}) {!r}", action, fname)
            Path(fname).parent.mkdir(parents=True, exist_ok=True)
            with open(fname, "w", encoding="utf-8") as f:
                f.write(contents)
        return True

    def write_json(self, fname_rel: str, data: Any) -> bool:
        return self.write_text(fname_rel, json.dumps(data, ensure_ascii=False, indent=2) + "\n")

    def finalize(self) -> str:
        """Log and return update statistics."""
        summary = (
            f"Outputs: {self._num_same} same, {self._num_changed} changed, {self._num_new} new"
        )
        if self._num_same == len(self._files_made):
            logger.debug(summary)
        else:
            logger.info(summary)
        return summary
