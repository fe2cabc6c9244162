# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Unit tests for scratch directory handling.
"""

import os

import pytest

from archaeologist.utils.tmp import temp_dir, temp_root


class TestTempDir:
    def test_created_under_namespace(self):
        with temp_dir() as path:
            assert os.path.isdir(path)
            assert os.path.dirname(path) == temp_root()
            assert os.path.basename(temp_root()) == 'diffing'

    def test_directories_are_unique(self):
        with temp_dir() as first, temp_dir() as second:
            assert first != second

    def test_removed_with_contents(self):
        with temp_dir() as path:
            with open(os.path.join(path, 'electron.new.d.ts'), 'w') as f:
                f.write('x')

        assert not os.path.exists(path)

    def test_removed_on_error(self):
        with pytest.raises(ValueError):
            with temp_dir() as path:
                raise ValueError('boom')

        assert not os.path.exists(path)
