"""
Location of the backing data file.

The registry keeps all of its records in a single JSON document.  Its
path comes from ``settings.data_file``; relative paths are resolved
against the project root so the service finds the same file no matter
which directory it is started from.
"""

import os
from pathlib import Path
from typing import Optional

from .config import settings


def get_data_path(data_file: Optional[str] = None) -> Path:
    """Compute the absolute path of the data file.

    If ``data_file`` (or ``settings.data_file`` when omitted) is
    absolute it is used directly, otherwise it is resolved relative to
    the project root.
    """
    data_file = data_file or settings.data_file
    if os.path.isabs(data_file):
        return Path(data_file)
    base_dir = Path(__file__).resolve().parent.parent.parent.parent  # project root
    return (base_dir / data_file).resolve()
