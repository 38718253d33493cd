"""Entry point for 'python -m brevity' command."""

from brevity.cli import main

if __name__ == "__main__":
    main()
