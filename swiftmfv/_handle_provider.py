"""Provide a mixin class for managing file handles."""

from contextlib import contextmanager
from typing import ContextManager
from pathlib import Path
import h5py


class HandleProvider:
    """
    Mixin class for managing file handles.

    Classes that read from snapshots either open the file themselves or are
    handed an already-open handle. Handles that were handed in are used as they
    are and never closed here; otherwise a handle is opened for the duration of
    each access.

    Parameters
    ----------
    filename : Path
        The filename used if a handle needs to be opened.

    handle : h5py.File, optional
        The file handle if it was opened externally.
    """

    def __init__(self, filename: Path, handle: h5py.File | None = None) -> None:
        self.filename = Path(filename)
        self._handle = handle

        return

    @property
    def handle_manager(self) -> bool:
        """Whether this object opens (and closes) its own handles."""
        return not self._handle

    @contextmanager
    def open_file(self) -> ContextManager[h5py.File]:
        """
        Return a context manager that can be used to access the file.

        This will use the existing handle if it is open. If not, a temporary
        handle is created and closed again on exit.

        Returns
        -------
        ContextManager
            A context manager which can be used to access the file.
        """
        if self._handle:
            yield self._handle
        else:
            with h5py.File(self.filename, "r") as handle:
                yield handle
