"""cmkctl — CMake build orchestration for GitHub Actions."""

__version__ = "0.1.0"
