"""CLI entry point for python -m jen.

Example:
    python -m jen
    python -m jen --watch site/jen.yaml
"""

from .cli import main
import sys

if __name__ == '__main__':
    sys.exit(main())
