# The MIT License (MIT)
# Copyright © 2025 Entrius

"""Scratch directories for artifact extraction and diffing."""

import os
import shutil
import tempfile
from contextlib import contextmanager
from typing import Iterator

from archaeologist.constants import TEMP_DIR_NAMESPACE


def temp_root() -> str:
    """Return the namespaced root that every scratch directory is created under."""
    return os.path.join(tempfile.gettempdir(), TEMP_DIR_NAMESPACE)


@contextmanager
def temp_dir() -> Iterator[str]:
    """Yield a fresh, uniquely named directory and remove it on every exit path."""
    root = temp_root()
    os.makedirs(root, exist_ok=True)
    path = tempfile.mkdtemp(dir=root)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
