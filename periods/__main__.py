"""
Entry point for running the CLI as a module.

Usage:
    python -m periods resolve 15:30
    python -m periods periods schedule.json --teacher T001 --class C001 --day monday
    python -m periods daily schedule.json --teacher T001
    python -m periods cache schedule.json preload
"""

from periods.cli import main

if __name__ == "__main__":
    main()
