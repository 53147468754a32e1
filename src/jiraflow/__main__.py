"""
Entry point for running jiraflow as a module.

This allows execution via `python -m jiraflow`.

Example:
    $ python -m jiraflow
"""

from . import main

if __name__ == "__main__":
    main()
