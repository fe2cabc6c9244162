# The MIT License (MIT)
# Copyright © 2025 Entrius

# NOTE: bump this number when we make new releases
__version__ = "1.0.0"
