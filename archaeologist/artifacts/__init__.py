from .base import ArtifactFetcher
from .circleci import CircleArtifactFetcher
from .gha import GHAArtifactFetcher

__all__ = ['ArtifactFetcher', 'CircleArtifactFetcher', 'GHAArtifactFetcher']
