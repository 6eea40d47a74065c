"""
Entry point for running the launcher with ``python -m arlaunch``.

The background child started by ``--daemonize`` is re-executed this way.
"""

from .cli import main

if __name__ == '__main__':
    main()
